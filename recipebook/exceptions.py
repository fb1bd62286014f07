"""Exception hierarchy for recipebook.

Backend exceptions from ``google.api_core`` never leave
:mod:`recipebook.gcp_storage`; they are re-raised as :class:`StorageError`.

Hierarchy
---------
RecipeBookError
├── RecipeValidationError
├── DuplicateRecipeError
└── StorageError
    └── StorageUnavailableError
"""

from __future__ import annotations


class RecipeBookError(Exception):
    """Base exception for every error the command layer reports."""


class RecipeValidationError(RecipeBookError):
    """Raised when a recipe violates a field constraint before it is written."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class DuplicateRecipeError(RecipeBookError):
    """Raised when a recipe with the same title is already stored."""

    def __init__(self, title: str) -> None:
        super().__init__(f"Recipe '{title}' already exists.")
        self.title = title


class StorageError(RecipeBookError):
    """Raised when the storage backend fails."""


class StorageUnavailableError(StorageError):
    """Raised when an operation runs against a store that never connected."""
