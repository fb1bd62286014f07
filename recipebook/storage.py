from __future__ import annotations

from typing import Iterable, Optional, Protocol

from .models import Recipe


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by the command layer."""

    def find_by_title(self, title: str) -> Optional[Recipe]:
        """Return the recipe with exactly this title, or ``None``."""

    def list_recipes(self) -> Iterable[Recipe]:
        """Return every stored recipe in the backend's native order."""

    def add_recipe(self, recipe: Recipe) -> Recipe:
        """Persist a new recipe and return the stored instance.

        Raises :class:`~recipebook.exceptions.DuplicateRecipeError` when the
        title is taken and
        :class:`~recipebook.exceptions.RecipeValidationError` when a field
        constraint fails.
        """

    def update_description(self, title: str, description: str) -> Optional[Recipe]:
        """Replace the description of a recipe and return the new representation."""

    def delete_by_title(self, title: str) -> Optional[Recipe]:
        """Remove a recipe and return what was removed, or ``None``."""

    def close(self) -> None:
        """Release the backend connection."""


__all__ = ["RecipeRepository"]
