from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional, Protocol

from .models import Recipe


logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000
DEFAULT_TTL = timedelta(hours=24)


@dataclass
class CacheEntry:
    recipe: Recipe
    inserted_at: float


class EvictionPolicy(Protocol):
    def choose_victim(self, entries: "OrderedDict[str, CacheEntry]") -> str:
        """Return the key of the entry to drop when the cache is over capacity."""


class InsertionOrderEviction:
    """Evict the entry inserted first, no matter how recently it was read."""

    def choose_victim(self, entries: "OrderedDict[str, CacheEntry]") -> str:
        return next(iter(entries))


class VolatileCache:
    """Bounded in-memory recipe cache with a lazily checked time-to-live.

    Entries keep the position of their first insertion: overwriting a key
    refreshes its timestamp but does not move it, and reads never reorder
    anything. Expired entries are only discarded when they are looked up.
    Recipes are copied on the way in and out, so callers never share state
    with a cached entry.
    The cache is not thread-safe on its own; :class:`RecipeCache` serializes
    access to it.
    """

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_CAPACITY,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
        eviction: Optional[EvictionPolicy] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.ttl = ttl
        self._ttl_seconds = ttl.total_seconds()
        self._clock = clock
        self._eviction = eviction if eviction is not None else InsertionOrderEviction()
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def get(self, recipe_id: str) -> Optional[Recipe]:
        entry = self._entries.get(recipe_id)
        if entry is None:
            return None

        if self._clock() - entry.inserted_at < self._ttl_seconds:
            return entry.recipe.model_copy(deep=True)

        logger.debug("Cache entry %s expired", recipe_id)
        del self._entries[recipe_id]
        return None

    def put(self, recipe: Recipe) -> None:
        if not recipe.id:
            raise ValueError("Only recipes with an id can be cached.")

        self._entries[recipe.id] = CacheEntry(
            recipe=recipe.model_copy(deep=True), inserted_at=self._clock()
        )

        if len(self._entries) > self.capacity:
            victim = self._eviction.choose_victim(self._entries)
            del self._entries[victim]
            logger.debug("Evicted %s from the volatile cache", victim)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, recipe_id: object) -> bool:
        return recipe_id in self._entries


__all__ = [
    "CacheEntry",
    "DEFAULT_CAPACITY",
    "DEFAULT_TTL",
    "EvictionPolicy",
    "InsertionOrderEviction",
    "VolatileCache",
]
