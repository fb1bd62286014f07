from .cli import main
from .exceptions import (
    DuplicateRecipeError,
    RecipeBookError,
    RecipeValidationError,
    StorageError,
    StorageUnavailableError,
)
from .models import Recipe
from .storage import RecipeRepository

__all__ = [
    "DuplicateRecipeError",
    "Recipe",
    "RecipeBookError",
    "RecipeRepository",
    "RecipeValidationError",
    "StorageError",
    "StorageUnavailableError",
    "main",
]
