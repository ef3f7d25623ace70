from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from recipe_cache.models import Recipe


def _payload() -> dict:
    return {
        "id": "curry-7",
        "name": "Chickpea Curry",
        "description": "Weeknight staple.",
        "cuisine": "Indian",
        "difficulty": "medium",
        "cooking_time": 35,
        "servings": 4,
        "ingredients": [
            {"name": "Chickpeas", "quantity": 2, "unit": "cans", "category": "pantry"},
            {"name": "Spinach", "quantity": "a handful", "notes": "baby leaves"},
        ],
        "instructions": ["Fry the spices.", "Simmer."],
        "nutrition": {"calories": 410, "protein": 15, "carbs": 52, "fat": 14.5, "sodium": 620},
        "dietary_info": ["vegan", "gluten-free", "vegan"],
        "seasonal": ["winter"],
        "tags": ["one-pot"],
        "tips": ["Finish with lemon."],
        "created_at": "2024-02-01T10:00:00.000Z",
        "voice_notes": "generated from a voice request",
    }


def test_model_validate_parses_nested_fields():
    recipe = Recipe.model_validate(_payload())

    assert recipe.ingredients[0].quantity == 2
    assert recipe.ingredients[1].unit is None
    assert recipe.nutrition.fat == 14.5
    assert recipe.dietary_info == ["vegan", "gluten-free"]
    assert recipe.model_extra == {"voice_notes": "generated from a voice request"}


def test_utc_timestamps_with_z_suffix_are_accepted():
    recipe = Recipe.model_validate(_payload())

    assert recipe.created_at == datetime(2024, 2, 1, 10, 0, tzinfo=timezone.utc)


def test_to_dict_keeps_unknown_keys_at_every_level():
    data = Recipe.model_validate(_payload()).to_dict()

    assert data["voice_notes"] == "generated from a voice request"
    assert data["ingredients"][1]["notes"] == "baby leaves"
    assert data["nutrition"]["sodium"] == 620
    assert Recipe.model_validate(data).to_dict() == data


def test_optional_sections_default_to_empty():
    recipe = Recipe.model_validate(
        {"name": "Toast", "description": None, "ingredients": None, "tags": None}
    )

    assert recipe.id is None
    assert recipe.description == ""
    assert recipe.cuisine is None
    assert recipe.ingredients == []
    assert recipe.tags == []
    assert recipe.nutrition is None


@pytest.mark.parametrize(
    "changes",
    [
        {"name": ""},
        {"name": "   "},
        {"name": None},
        {"id": "a/b"},
        {"id": ""},
        {"ingredients": "tomato"},
        {"ingredients": [{"quantity": 1}]},
        {"ingredients": [{"name": " "}]},
        {"dietary_info": "vegan"},
        {"cooking_time": "soon"},
        {"nutrition": [1, 2]},
        {"created_at": "yesterday"},
    ],
)
def test_malformed_payloads_are_rejected(changes):
    payload = _payload()
    payload.update(changes)

    with pytest.raises(ValidationError):
        Recipe.model_validate(payload)
