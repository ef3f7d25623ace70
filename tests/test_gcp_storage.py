from __future__ import annotations

import pytest
from google.api_core import exceptions as gcloud_exceptions

from recipe_cache.errors import StorageFailure
from recipe_cache.gcp_storage import FirestoreRecipeStore


class FakeSnapshot:
    def __init__(self, data):
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return self._data


class FakeDocument:
    def __init__(self, client: "FakeFirestoreClient", path: str) -> None:
        self._client = client
        self.path = path

    def collection(self, name: str) -> "FakeCollection":
        return FakeCollection(self._client, f"{self.path}/{name}")

    def get(self) -> FakeSnapshot:
        self._client.check()
        return FakeSnapshot(self._client.documents.get(self.path))

    def set(self, data: dict) -> None:
        self._client.check()
        self._client.documents[self.path] = data


class FakeCollection:
    def __init__(self, client: "FakeFirestoreClient", path: str) -> None:
        self._client = client
        self.path = path

    def document(self, name: str) -> FakeDocument:
        return FakeDocument(self._client, f"{self.path}/{name}")


class FakeFirestoreClient:
    def __init__(self) -> None:
        self.documents: dict = {}
        self.error = None

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def check(self) -> None:
        if self.error is not None:
            raise self.error


def test_put_and_get_use_entries_of_named_cache():
    client = FakeFirestoreClient()
    store = FirestoreRecipeStore(client=client, collection_name="caches", cache_name="weekly")

    store.put("recipe:r1", {"id": "r1", "name": "Soup"})

    assert client.documents == {
        "caches/weekly/entries/recipe:r1": {"value": {"id": "r1", "name": "Soup"}}
    }
    assert store.get("recipe:r1") == {"id": "r1", "name": "Soup"}
    assert store.cache_name == "weekly"


def test_get_missing_key_returns_none():
    store = FirestoreRecipeStore(client=FakeFirestoreClient())

    assert store.get("recipe_index") is None


def test_api_errors_become_storage_failures():
    client = FakeFirestoreClient()
    store = FirestoreRecipeStore(client=client)
    client.error = gcloud_exceptions.ServiceUnavailable("firestore is down")

    with pytest.raises(StorageFailure):
        store.get("recipe:r1")
    with pytest.raises(StorageFailure):
        store.put("recipe:r1", {"id": "r1"})


def test_from_env_reads_configuration(monkeypatch):
    created = {}

    def fake_init(self, *, project=None, collection_name="recipe_caches", cache_name="global", client=None):
        created.update(project=project, collection_name=collection_name, cache_name=cache_name)

    monkeypatch.setattr(FirestoreRecipeStore, "__init__", fake_init)
    monkeypatch.setenv("GCP_PROJECT", "kitchen")
    monkeypatch.setenv("RECIPES_COLLECTION", "recipes")
    monkeypatch.setenv("RECIPE_CACHE_NAME", "staging")

    FirestoreRecipeStore.from_env()

    assert created == {"project": "kitchen", "collection_name": "recipes", "cache_name": "staging"}
