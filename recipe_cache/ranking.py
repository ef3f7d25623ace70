from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional

from .errors import InvalidInput
from .index import IndexManager
from .models import Recipe
from .search import Hydrator, hydrate_all


DEFAULT_SIMILAR_LIMIT = 5
DEFAULT_RANKING_LIMIT = 10


def current_season(today: Optional[date] = None) -> str:
    """Meteorological season for the northern hemisphere."""

    month = (today or date.today()).month
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "fall"
    return "winter"


def check_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidInput("limit must be a positive integer.")
    return limit


@dataclass
class PopularRecipe:
    recipe: Recipe
    popularity_score: int

    def to_dict(self) -> dict:
        data = self.recipe.to_dict()
        data["popularity_score"] = self.popularity_score
        return data


class SimilarityEngine:
    """Finds recipes sharing an ingredient or the cuisine of a seed recipe.

    Candidates are not scored: a recipe sharing five ingredients ranks no
    higher than one sharing only the cuisine. Ingredient matches are
    collected first, then cuisine matches.
    """

    def __init__(self, index: IndexManager, hydrate: Hydrator) -> None:
        self._index = index
        self._hydrate = hydrate

    def similar(self, seed: Recipe, limit: int = DEFAULT_SIMILAR_LIMIT) -> List[Recipe]:
        check_limit(limit)
        record = self._index.load()

        found: Dict[str, None] = {}
        for ingredient in seed.ingredients:
            found.update(dict.fromkeys(record.ingredient_ids(ingredient.name)))
        if seed.cuisine:
            found.update(dict.fromkeys(record.by_cuisine.get(seed.cuisine, [])))
        found.pop(seed.id, None)

        return hydrate_all(list(found)[:limit], self._hydrate)


class RankingService:
    def __init__(
        self,
        index: IndexManager,
        hydrate: Hydrator,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._index = index
        self._hydrate = hydrate
        self._today = today

    def by_season(
        self, season: Optional[str] = None, limit: int = DEFAULT_RANKING_LIMIT
    ) -> List[Recipe]:
        """Recipes tagged with ``season`` in the order they were first indexed.

        Defaults to the current season when none is given.
        """

        check_limit(limit)
        season = season or current_season(self._today())
        record = self._index.load()
        return hydrate_all(record.by_season.get(season, [])[:limit], self._hydrate)

    def popular(
        self, category: Optional[str] = None, limit: int = DEFAULT_RANKING_LIMIT
    ) -> List[PopularRecipe]:
        """Most written recipes, or the recipes of one cuisine.

        When ``category`` names an indexed cuisine the result is that
        cuisine's recipes in index order and popularity plays no part in the
        ordering. Otherwise every known recipe is ranked by its popularity
        score, ties keeping the order in which ids were first scored.
        """

        check_limit(limit)
        record = self._index.load()
        scores = record.popularity_scores

        if category and category in record.by_cuisine:
            recipe_ids = record.by_cuisine[category]
        else:
            recipe_ids = sorted(scores, key=lambda recipe_id: scores[recipe_id], reverse=True)

        return [
            PopularRecipe(recipe=recipe, popularity_score=scores.get(recipe.id, 0))
            for recipe in hydrate_all(recipe_ids[:limit], self._hydrate)
        ]


__all__ = [
    "DEFAULT_RANKING_LIMIT",
    "DEFAULT_SIMILAR_LIMIT",
    "PopularRecipe",
    "RankingService",
    "SimilarityEngine",
    "check_limit",
    "current_season",
]
