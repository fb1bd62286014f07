import math
from dataclasses import dataclass
from datetime import datetime
from numbers import Real
from typing import List, Optional, Union

from .exceptions import RecipeValidationError

MIN_PREP_TIME_MINUTES = 1

# Firestore stores integers as int64; larger integral values stay doubles.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

PrepTime = Union[int, float]


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    title: str
    ingredients: List[str]
    instructions: str
    description: Optional[str] = None
    prep_time_in_minutes: Optional[PrepTime] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None


def parse_ingredients(ingredients_text: str) -> List[str]:
    return [token.strip() for token in ingredients_text.split(",")]


def parse_prep_time(text: str) -> PrepTime:
    """Convert command-line text to a number without range checks.

    Text that is not a number becomes ``nan`` so the constraint check in
    :func:`validate_recipe` rejects it at write time.
    """

    try:
        value = float(text)
    except ValueError:
        return math.nan

    if value.is_integer() and INT64_MIN <= value <= INT64_MAX:
        return int(value)
    return value


def validate_recipe(recipe: Recipe) -> None:
    """Raise :class:`RecipeValidationError` for the first violated constraint."""

    if not recipe.title:
        raise RecipeValidationError("Path `title` is required.", field="title")

    if not recipe.ingredients:
        raise RecipeValidationError("Path `ingredients` is required.", field="ingredients")

    if not recipe.instructions:
        raise RecipeValidationError("Path `instructions` is required.", field="instructions")

    prep_time = recipe.prep_time_in_minutes
    if prep_time is None:
        return

    if (
        isinstance(prep_time, bool)
        or not isinstance(prep_time, Real)
        or not math.isfinite(prep_time)
    ):
        raise RecipeValidationError(
            f"Cast to Number failed for value {prep_time!r} at path `prep_time_in_minutes`.",
            field="prep_time_in_minutes",
        )

    if prep_time < MIN_PREP_TIME_MINUTES:
        raise RecipeValidationError(
            f"Path `prep_time_in_minutes` ({prep_time}) is less than minimum allowed "
            f"value ({MIN_PREP_TIME_MINUTES}).",
            field="prep_time_in_minutes",
        )


__all__ = [
    "MIN_PREP_TIME_MINUTES",
    "Recipe",
    "parse_ingredients",
    "parse_prep_time",
    "validate_recipe",
]
