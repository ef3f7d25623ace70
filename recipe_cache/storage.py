from __future__ import annotations

from typing import Optional, Protocol


def recipe_key(recipe_id: str) -> str:
    return f"recipe:{recipe_id}"


INDEX_KEY = "recipe_index"


class PersistentStore(Protocol):
    """Durable key/value storage backing a recipe cache.

    The store is authoritative: values never expire and there is no size
    bound. Writes are last-write-wins.
    """

    def get(self, key: str) -> Optional[dict]:
        """Return the value stored under ``key`` or ``None`` when absent.

        Raises :class:`~recipe_cache.errors.StorageFailure` when the backend
        cannot be reached.
        """

    def put(self, key: str, value: dict) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises :class:`~recipe_cache.errors.StorageFailure` when the write is
        rejected.
        """


__all__ = ["INDEX_KEY", "PersistentStore", "recipe_key"]
