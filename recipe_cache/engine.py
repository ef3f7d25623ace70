from __future__ import annotations

import logging
import os
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional, Union

from pydantic import ValidationError

from .errors import InvalidInput, RecipeNotFound
from .index import IndexManager
from .models import Recipe
from .ranking import (
    DEFAULT_RANKING_LIMIT,
    DEFAULT_SIMILAR_LIMIT,
    PopularRecipe,
    RankingService,
    SimilarityEngine,
)
from .search import SearchEngine, SearchFilters, SearchResult
from .storage import PersistentStore, recipe_key
from .volatile import DEFAULT_CAPACITY, DEFAULT_TTL, VolatileCache


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_recipe_id() -> str:
    return f"recipe_{uuid.uuid4().hex}"


@dataclass
class SetResult:
    id: str
    success: bool = True

    def to_dict(self) -> dict:
        return {"id": self.id, "success": self.success}


class RecipeCache:
    """Two-tier recipe cache with secondary indices.

    Reads go to the volatile cache first and fall back to the persistent
    store. Writes go to the persistent store, then the volatile cache, then
    the index. Each instance behaves as a single writer: every public method
    holds the same lock, so the index read-modify-write never interleaves
    with another operation on this instance.
    """

    def __init__(
        self,
        store: PersistentStore,
        *,
        name: str = "global",
        volatile: Optional[VolatileCache] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.name = name
        self._store = store
        self._volatile = volatile if volatile is not None else VolatileCache()
        self._now = now
        self._lock = threading.RLock()

        self.index = IndexManager(store, now=now)
        self._search = SearchEngine(self.index, self._lookup)
        self._similarity = SimilarityEngine(self.index, self._lookup)
        self._ranking = RankingService(self.index, self._lookup, today=lambda: now().date())

    @classmethod
    def from_env(cls) -> "RecipeCache":
        """Build a Firestore backed cache configured through environment variables."""

        from .gcp_storage import FirestoreRecipeStore

        capacity = int(os.environ.get("RECIPE_CACHE_CAPACITY", DEFAULT_CAPACITY))
        ttl_hours = os.environ.get("RECIPE_CACHE_TTL_HOURS")
        ttl = timedelta(hours=float(ttl_hours)) if ttl_hours else DEFAULT_TTL

        store = FirestoreRecipeStore.from_env()
        return cls(
            store,
            name=store.cache_name,
            volatile=VolatileCache(capacity=capacity, ttl=ttl),
        )

    @property
    def volatile(self) -> VolatileCache:
        return self._volatile

    def get(self, recipe_id: str) -> Recipe:
        """Return a recipe or raise :class:`RecipeNotFound`."""

        if not recipe_id:
            raise InvalidInput("A recipe id is required.")
        with self._lock:
            recipe = self._lookup(recipe_id)
        if recipe is None:
            raise RecipeNotFound(recipe_id)
        return recipe

    def set(self, recipe: Union[Recipe, dict]) -> SetResult:
        """Persist, cache and index a recipe, assigning an id when it has none.

        The recipe is durable as soon as the store write returns. If indexing
        fails afterwards the error propagates, and the recipe stays
        retrievable by id but is missing from search, similarity and
        popularity results until it is written again.
        """

        if isinstance(recipe, Recipe):
            recipe = recipe.model_copy(deep=True)
        else:
            try:
                recipe = Recipe.model_validate(recipe)
            except ValidationError as exc:
                raise InvalidInput(f"Invalid recipe: {exc}") from exc

        with self._lock:
            now = self._now()
            recipe.id = recipe.id or new_recipe_id()
            if recipe.created_at is None:
                recipe.created_at = now
            recipe.cached_at = now

            self._store.put(recipe_key(recipe.id), recipe.to_dict())
            self._volatile.put(recipe)
            logger.info("Stored recipe %s (%s) in cache '%s'", recipe.id, recipe.name, self.name)

            try:
                self.index.update(recipe)
            except Exception:
                logger.error(
                    "Recipe %s was stored but could not be indexed; it will not show up "
                    "in search results until it is written again.",
                    recipe.id,
                )
                raise

        return SetResult(id=recipe.id)

    def search(self, query: Optional[str], filters: Any = None) -> SearchResult:
        if not isinstance(filters, SearchFilters):
            filters = SearchFilters.from_dict(filters)
        with self._lock:
            return self._search.search(query, filters)

    def by_season(
        self, season: Optional[str] = None, limit: int = DEFAULT_RANKING_LIMIT
    ) -> List[Recipe]:
        with self._lock:
            return self._ranking.by_season(season, limit)

    def similar(self, recipe_id: str, limit: int = DEFAULT_SIMILAR_LIMIT) -> List[Recipe]:
        with self._lock:
            seed = self.get(recipe_id)
            return self._similarity.similar(seed, limit)

    def popular(
        self, category: Optional[str] = None, limit: int = DEFAULT_RANKING_LIMIT
    ) -> List[PopularRecipe]:
        with self._lock:
            return self._ranking.popular(category, limit)

    def _lookup(self, recipe_id: str) -> Optional[Recipe]:
        recipe = self._volatile.get(recipe_id)
        if recipe is not None:
            return recipe

        data = self._store.get(recipe_key(recipe_id))
        if data is None:
            logger.debug("Recipe %s not found in cache '%s'", recipe_id, self.name)
            return None

        recipe = Recipe.model_validate(data)
        self._volatile.put(recipe)
        return recipe


__all__ = ["RecipeCache", "SetResult", "new_recipe_id"]
