from __future__ import annotations

import logging
import os
from typing import Optional

from google.api_core import exceptions as gcloud_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore

from .errors import StorageFailure
from .storage import PersistentStore


logger = logging.getLogger(__name__)

_GCP_ERRORS = (gcloud_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


class FirestoreRecipeStore(PersistentStore):
    """Firestore backed persistent store.

    Every key is a document under ``<collection>/<cache_name>/entries`` holding
    the value in a single ``value`` field, so each named cache keeps its
    recipes and its index apart from the others.
    """

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        collection_name: str = "recipe_caches",
        cache_name: str = "global",
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name
        self._cache_name = cache_name

        self._firestore_client = client if client is not None else firestore.Client(project=project)
        self._entries = (
            self._firestore_client.collection(collection_name)
            .document(cache_name)
            .collection("entries")
        )

    @classmethod
    def from_env(cls) -> "FirestoreRecipeStore":
        """Build a store instance from environment variables."""

        project = os.environ.get("GCP_PROJECT")
        collection_name = os.environ.get("RECIPES_COLLECTION", "recipe_caches")
        cache_name = os.environ.get("RECIPE_CACHE_NAME", "global")
        return cls(project=project, collection_name=collection_name, cache_name=cache_name)

    @property
    def cache_name(self) -> str:
        return self._cache_name

    def get(self, key: str) -> Optional[dict]:
        try:
            snapshot = self._entries.document(key).get()
        except _GCP_ERRORS as exc:
            raise StorageFailure(f"Failed to read '{key}': {exc}") from exc

        if not snapshot.exists:
            return None

        data = snapshot.to_dict() or {}
        return data.get("value")

    def put(self, key: str, value: dict) -> None:
        try:
            self._entries.document(key).set({"value": value})
        except _GCP_ERRORS as exc:
            raise StorageFailure(f"Failed to write '{key}': {exc}") from exc
        logger.debug("Wrote %s to %s/%s", key, self._collection_name, self._cache_name)


__all__ = ["FirestoreRecipeStore"]
