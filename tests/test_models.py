from __future__ import annotations

import math
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipebook.exceptions import RecipeValidationError
from recipebook.models import Recipe, parse_ingredients, parse_prep_time, validate_recipe


def make_recipe(**overrides) -> Recipe:
    fields = {
        "title": "Pancakes",
        "description": "Fluffy",
        "ingredients": ["flour", "milk", "eggs"],
        "instructions": "Whisk and fry.",
        "prep_time_in_minutes": 20,
    }
    fields.update(overrides)
    return Recipe(**fields)


def test_parse_ingredients_splits_on_commas_and_strips():
    assert parse_ingredients("Tomatoes, Onion ,Garlic,  Vegetable Broth") == [
        "Tomatoes",
        "Onion",
        "Garlic",
        "Vegetable Broth",
    ]


def test_parse_ingredients_keeps_single_token():
    assert parse_ingredients("Water") == ["Water"]


@pytest.mark.parametrize(
    ("text", "expected"),
    [("30", 30), ("2.5", 2.5), (" 7 ", 7), ("0", 0), ("-3", -3)],
)
def test_parse_prep_time_converts_numbers(text, expected):
    value = parse_prep_time(text)
    assert value == expected
    assert type(value) is type(expected)


def test_parse_prep_time_returns_nan_for_text():
    assert math.isnan(parse_prep_time("half an hour"))


def test_parse_prep_time_keeps_integers_beyond_int64_as_float():
    value = parse_prep_time("100000000000000000000")
    assert value == 1e20
    assert type(value) is float

    assert parse_prep_time("9223372036854775807") == 2**63
    assert type(parse_prep_time("9223372036854775807")) is float
    assert type(parse_prep_time("9007199254740992")) is int


def test_validate_recipe_accepts_complete_recipe():
    validate_recipe(make_recipe())
    validate_recipe(make_recipe(description=None, prep_time_in_minutes=None))


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"title": ""}, "title"),
        ({"ingredients": []}, "ingredients"),
        ({"instructions": ""}, "instructions"),
        ({"prep_time_in_minutes": 0}, "prep_time_in_minutes"),
        ({"prep_time_in_minutes": 0.5}, "prep_time_in_minutes"),
        ({"prep_time_in_minutes": math.nan}, "prep_time_in_minutes"),
        ({"prep_time_in_minutes": math.inf}, "prep_time_in_minutes"),
        ({"prep_time_in_minutes": float("1e400")}, "prep_time_in_minutes"),
        ({"prep_time_in_minutes": "soon"}, "prep_time_in_minutes"),
    ],
)
def test_validate_recipe_rejects_constraint_violations(overrides, field):
    with pytest.raises(RecipeValidationError) as excinfo:
        validate_recipe(make_recipe(**overrides))

    assert excinfo.value.field == field
