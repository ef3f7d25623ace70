from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


Number = Union[int, float]


class Ingredient(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    quantity: Optional[Union[int, float, str]] = None
    unit: Optional[str] = None
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _v_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Each ingredient needs a name.")
        return v


class NutritionFacts(BaseModel):
    model_config = ConfigDict(extra="allow")

    calories: Optional[Number] = None
    protein: Optional[Number] = None
    carbs: Optional[Number] = None
    fat: Optional[Number] = None
    fiber: Optional[Number] = None


class Recipe(BaseModel):
    """Domain object representing a cached recipe.

    ``dietary_info`` and ``seasonal`` behave as sets: duplicates are dropped
    while the first-seen order is kept. Keys the schema does not know about,
    at any level, are kept so that a stored payload reads back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    id: Optional[str] = None
    description: str = ""
    cuisine: Optional[str] = None
    difficulty: Optional[str] = None
    cooking_time: Optional[Number] = None
    servings: Optional[Number] = None
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    nutrition: Optional[NutritionFacts] = None
    dietary_info: List[str] = Field(default_factory=list)
    seasonal: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    cached_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def _v_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("A recipe needs a name.")
        return v

    @field_validator("id")
    @classmethod
    def _v_id(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and (not v or "/" in v):
            raise ValueError("Recipe ids must be non-empty and may not contain '/'.")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _v_description(cls, v):
        return "" if v is None else v

    @field_validator(
        "ingredients", "instructions", "dietary_info", "seasonal", "tags", "tips", mode="before"
    )
    @classmethod
    def _v_lists(cls, v):
        return [] if v is None else v

    @field_validator("dietary_info", "seasonal")
    @classmethod
    def _v_unique_tags(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


__all__ = ["Ingredient", "NutritionFacts", "Number", "Recipe"]
