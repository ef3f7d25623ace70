from __future__ import annotations

import copy
import sys
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipe_cache.engine import RecipeCache
from recipe_cache.errors import StorageFailure
from recipe_cache.models import Ingredient, Recipe
from recipe_cache.volatile import VolatileCache


class InMemoryStore:
    """Dict backed persistent store used for tests.

    Values are copied on the way in and out so that nothing shares state
    with the caller, like a real backend. ``reads`` counts ``get`` calls per
    key and keys listed in ``failing_keys`` reject writes.
    """

    def __init__(self) -> None:
        self.data: dict = {}
        self.reads: Counter = Counter()
        self.failing_keys: set = set()

    def get(self, key: str) -> Optional[dict]:
        self.reads[key] += 1
        value = self.data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def put(self, key: str, value: dict) -> None:
        if key in self.failing_keys:
            raise StorageFailure(f"write to '{key}' rejected")
        self.data[key] = copy.deepcopy(value)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


FIXED_NOW = datetime(2024, 7, 15, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(store: InMemoryStore, clock: FakeClock) -> RecipeCache:
    return RecipeCache(store, volatile=VolatileCache(clock=clock), now=lambda: FIXED_NOW)


@pytest.fixture
def make_recipe():
    def factory(
        recipe_id: Optional[str] = None,
        *,
        name: str = "Test Recipe",
        ingredients: tuple = (),
        cuisine: Optional[str] = None,
        diets: tuple = (),
        seasons: tuple = (),
    ) -> Recipe:
        return Recipe(
            id=recipe_id,
            name=name,
            cuisine=cuisine,
            ingredients=[Ingredient(name=ingredient) for ingredient in ingredients],
            dietary_info=list(diets),
            seasonal=list(seasons),
        )

    return factory
