from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .models import Recipe
from .storage import INDEX_KEY, PersistentStore


logger = logging.getLogger(__name__)

Facet = Dict[str, List[str]]


def _append_unique(facet: Facet, value: str, recipe_id: str) -> None:
    ids = facet.setdefault(value, [])
    if recipe_id not in ids:
        ids.append(recipe_id)


class IndexRecord(BaseModel):
    """Secondary indices over every recipe written to one cache.

    Older index documents name the ingredient facet ``by_ingredients``;
    both spellings load.
    """

    by_cuisine: Facet = Field(default_factory=dict)
    by_diet: Facet = Field(default_factory=dict)
    by_season: Facet = Field(default_factory=dict)
    by_ingredient: Facet = Field(
        default_factory=dict,
        validation_alias=AliasChoices("by_ingredient", "by_ingredients"),
    )
    popularity_scores: Dict[str, int] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None

    @field_validator(
        "by_cuisine", "by_diet", "by_season", "by_ingredient", "popularity_scores", mode="before"
    )
    @classmethod
    def _v_empty(cls, v):
        return {} if v is None else v

    def add_cuisine(self, cuisine: str, recipe_id: str) -> None:
        _append_unique(self.by_cuisine, cuisine, recipe_id)

    def add_diet(self, diet: str, recipe_id: str) -> None:
        _append_unique(self.by_diet, diet, recipe_id)

    def add_season(self, season: str, recipe_id: str) -> None:
        _append_unique(self.by_season, season, recipe_id)

    def add_ingredient(self, ingredient_name: str, recipe_id: str) -> None:
        _append_unique(self.by_ingredient, ingredient_name.lower(), recipe_id)

    def bump_popularity(self, recipe_id: str) -> int:
        score = self.popularity_scores.get(recipe_id, 0) + 1
        self.popularity_scores[recipe_id] = score
        return score

    def ingredient_ids(self, ingredient_name: str) -> List[str]:
        return self.by_ingredient.get(ingredient_name.lower(), [])

    @classmethod
    def from_dict(cls, data: dict) -> "IndexRecord":
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class IndexManager:
    """Keeps the aggregate :class:`IndexRecord` of a cache up to date.

    The record is read from and written back to the persistent store as a
    single value on every update. That read-modify-write is not atomic, so
    callers must make sure only one update runs at a time.
    """

    def __init__(
        self,
        store: PersistentStore,
        *,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._store = store
        self._now = now

    def load(self) -> IndexRecord:
        data = self._store.get(INDEX_KEY)
        if data is None:
            return IndexRecord()
        return IndexRecord.from_dict(data)

    def update(self, recipe: Recipe) -> IndexRecord:
        """Index ``recipe`` under every facet it carries and persist the record.

        Every call bumps the recipe's popularity score, including rewrites of
        an id that is already indexed. If the final write fails the stored
        record is left as it was.
        """

        if not recipe.id:
            raise ValueError("Only recipes with an id can be indexed.")

        record = self.load()

        if recipe.cuisine:
            record.add_cuisine(recipe.cuisine, recipe.id)
        for diet in recipe.dietary_info:
            record.add_diet(diet, recipe.id)
        for season in recipe.seasonal:
            record.add_season(season, recipe.id)
        for ingredient in recipe.ingredients:
            record.add_ingredient(ingredient.name, recipe.id)

        score = record.bump_popularity(recipe.id)
        record.last_updated = self._now()

        self._store.put(INDEX_KEY, record.to_dict())
        logger.debug("Indexed %s (popularity %d)", recipe.id, score)
        return record


__all__ = ["IndexManager", "IndexRecord"]
