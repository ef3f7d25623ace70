from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import InvalidInput
from .index import IndexManager, IndexRecord
from .models import Recipe


MAX_SEARCH_RESULTS = 20

Hydrator = Callable[[str], Optional[Recipe]]


def tokenize(query: str) -> List[str]:
    """Split a query into lowercase terms. Blank queries have no terms."""

    return query.lower().split()


def ingredient_matches(term: str, ingredient_key: str) -> bool:
    """A term matches an indexed ingredient when it occurs anywhere inside it.

    ``"tom"`` matches ``"tomato"`` and ``"cherry tomatoes"``; this is
    substring containment, not token equality.
    """

    return term in ingredient_key


def hydrate_all(recipe_ids: Iterable[str], hydrate: Hydrator) -> List[Recipe]:
    """Resolve ids to recipes, silently dropping ids that no longer resolve."""

    recipes = []
    for recipe_id in recipe_ids:
        recipe = hydrate(recipe_id)
        if recipe is not None:
            recipes.append(recipe)
    return recipes


@dataclass
class SearchFilters:
    cuisine: Optional[str] = None
    diet: Optional[str] = None
    season: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "SearchFilters":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidInput("Search filters must be an object.")
        values = {}
        for key in ("cuisine", "diet", "season"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise InvalidInput(f"Filter '{key}' must be a string.")
            values[key] = value or None
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        data = {"cuisine": self.cuisine, "diet": self.diet, "season": self.season}
        return {key: value for key, value in data.items() if value is not None}


@dataclass
class SearchResult:
    query: str
    filters: SearchFilters
    recipes: List[Recipe] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.recipes)

    def to_dict(self) -> dict:
        return {
            "recipes": [recipe.to_dict() for recipe in self.recipes],
            "total": self.total,
            "query": self.query,
            "filters": self.filters.to_dict(),
        }


class SearchEngine:
    """Free-text ingredient search narrowed by cuisine, diet and season facets.

    Filters only ever narrow the ingredient matches: a query without terms
    returns nothing, whatever the filters say. A filter naming a facet value
    that has never been indexed is ignored rather than emptying the result.
    """

    def __init__(
        self,
        index: IndexManager,
        hydrate: Hydrator,
        *,
        max_results: int = MAX_SEARCH_RESULTS,
    ) -> None:
        self._index = index
        self._hydrate = hydrate
        self.max_results = max_results

    def search(self, query: Optional[str], filters: Optional[SearchFilters] = None) -> SearchResult:
        if query is None:
            raise InvalidInput("A search query is required.")
        filters = filters or SearchFilters()

        record = self._index.load()
        candidates = self.candidates(record, tokenize(query))
        candidates = self.apply_filters(record, candidates, filters)

        recipes = hydrate_all(candidates[: self.max_results], self._hydrate)
        return SearchResult(query=query, filters=filters, recipes=recipes)

    @staticmethod
    def candidates(record: IndexRecord, terms: List[str]) -> List[str]:
        found: Dict[str, None] = {}
        for term in terms:
            for ingredient_key, recipe_ids in record.by_ingredient.items():
                if ingredient_matches(term, ingredient_key):
                    found.update(dict.fromkeys(recipe_ids))
        return list(found)

    @staticmethod
    def apply_filters(
        record: IndexRecord, candidates: List[str], filters: SearchFilters
    ) -> List[str]:
        for facet, value in (
            (record.by_cuisine, filters.cuisine),
            (record.by_diet, filters.diet),
            (record.by_season, filters.season),
        ):
            if value and value in facet:
                allowed = set(facet[value])
                candidates = [recipe_id for recipe_id in candidates if recipe_id in allowed]
        return candidates


__all__ = [
    "MAX_SEARCH_RESULTS",
    "SearchEngine",
    "SearchFilters",
    "SearchResult",
    "hydrate_all",
    "ingredient_matches",
    "tokenize",
]
