from __future__ import annotations


class RecipeCacheError(Exception):
    """Base class for errors raised by the recipe cache."""


class RecipeNotFound(RecipeCacheError, KeyError):
    """Raised when a recipe id is unknown to both the cache and the store."""

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Recipe '{recipe_id}' does not exist.")
        self.recipe_id = recipe_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0])


class InvalidInput(RecipeCacheError, ValueError):
    """Raised for malformed recipes, queries or limits."""


class StorageFailure(RecipeCacheError, RuntimeError):
    """Raised when the persistent store is unavailable or rejects a write."""


__all__ = ["RecipeCacheError", "RecipeNotFound", "InvalidInput", "StorageFailure"]
