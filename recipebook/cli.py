"""Command-line entry point and command dispatch for recipebook.

One invocation runs one command::

    recipebook create <title> <description> <ingredients-csv> <instructions> <prepTimeInMinutes>
    recipebook list
    recipebook find <title>
    recipebook update <title> <newDescription>
    recipebook delete <title>
    recipebook sample

Every handler catches :class:`~recipebook.exceptions.RecipeBookError` around
its store call and prints a message, so all paths fall through to closing
the store. There are no distinct exit codes.
"""

from __future__ import annotations

import os
import sys
from typing import Callable, Dict, List, Optional, Sequence

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.markup import escape

from .exceptions import DuplicateRecipeError, RecipeBookError
from .models import Recipe, parse_ingredients, parse_prep_time
from .storage import RecipeRepository

PROG = "recipebook"
DEFAULT_LOG_LEVEL = "INFO"

SAMPLE_RECIPE = Recipe(
    title="Garlic Bread",
    description="Crispy garlic bread perfect with pasta or soup.",
    ingredients=["Bread", "Garlic", "Butter", "Parsley"],
    instructions="Spread garlic butter on bread and bake at 375°F for 10 mins.",
    prep_time_in_minutes=15,
)

EXAMPLES = {
    "create": (
        f'{PROG} create "Classic Tomato Soup" "A simple and delicious homemade tomato soup." '
        '"Tomatoes,Onion,Garlic,Vegetable Broth,Olive Oil" '
        '"1. Sauté onions and garlic. 2. Add tomatoes and broth. 3. Simmer and blend." 30'
    ),
    "find": f'{PROG} find "Classic Tomato Soup"',
    "update": (
        f'{PROG} update "Classic Tomato Soup" '
        '"A cozy and comforting tomato soup perfect for chilly days."'
    ),
    "delete": f'{PROG} delete "Classic Tomato Soup"',
}

USAGE = f"""
Missing or unknown command. Please use one of the commands (create, list, find, update, delete, sample):

- To add the recipe
    {PROG} create <title> <description> <ingredient1,ingredient2,...> <instructions> <prepTimeInMinutes>
    Example: {EXAMPLES["create"]}

- To see all recipes
    {PROG} list

- To find the recipe
    {PROG} find <title>
    Example: {EXAMPLES["find"]}

- To update recipe description
    {PROG} update <title> <newDescription>
    Example: {EXAMPLES["update"]}

- To remove the recipe
    {PROG} delete <title>
    Example: {EXAMPLES["delete"]}

- To create a sample Garlic Bread recipe
    {PROG} sample
"""


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logger.remove()
    try:
        logger.add(sys.stderr, level=level.upper())
    except ValueError:
        logger.add(sys.stderr, level=DEFAULT_LOG_LEVEL)
        logger.warning("Unknown log level {!r}, using {}.", level, DEFAULT_LOG_LEVEL)


def format_recipe(recipe: Recipe) -> str:
    """Render a recipe as the indented block shown by every command."""

    lines = [
        f"Title: {recipe.title}",
        f"Description: {recipe.description}",
        f"Ingredients: {', '.join(recipe.ingredients)}",
        f"Instructions: {recipe.instructions}",
        f"Preparation Time: {recipe.prep_time_in_minutes} minutes.",
    ]
    if recipe.created_at is not None:
        lines.append(f"Created Time: {recipe.created_at.isoformat()}")
    return "\n".join(f"\t{line}" for line in lines)


class CommandDispatcher:
    """Map a command name and its positional arguments onto one store call."""

    def __init__(self, storage: RecipeRepository, console: Console) -> None:
        self.storage = storage
        self.console = console
        self._commands: Dict[str, tuple[int, Callable[..., None]]] = {
            "create": (5, self._create_from_args),
            "list": (0, self.list_recipes),
            "find": (1, self.find_recipe),
            "update": (2, self.update_description),
            "delete": (1, self.delete_recipe),
            "sample": (0, self.create_sample),
        }

    def dispatch(self, argv: Sequence[str]) -> None:
        if not argv or argv[0] not in self._commands:
            self._print(USAGE)
            return

        command, args = argv[0], list(argv[1:])
        arity, handler = self._commands[command]

        # list and sample take no arguments; extras are ignored.
        if arity and len(args) != arity:
            self._print(f"Invalid input! Try usage example:\n{EXAMPLES[command]}")
            return

        handler(*args)

    def _create_from_args(
        self,
        title: str,
        description: str,
        ingredients_text: str,
        instructions: str,
        prep_time_text: str,
    ) -> None:
        self.create_recipe(
            Recipe(
                title=title,
                description=description,
                ingredients=parse_ingredients(ingredients_text),
                instructions=instructions,
                prep_time_in_minutes=parse_prep_time(prep_time_text),
            )
        )

    def create_sample(self) -> None:
        self.create_recipe(
            Recipe(
                title=SAMPLE_RECIPE.title,
                description=SAMPLE_RECIPE.description,
                ingredients=list(SAMPLE_RECIPE.ingredients),
                instructions=SAMPLE_RECIPE.instructions,
                prep_time_in_minutes=SAMPLE_RECIPE.prep_time_in_minutes,
            )
        )

    def create_recipe(self, recipe: Recipe) -> Optional[Recipe]:
        self._print(f"\n\tCreating the new recipe...\n{format_recipe(recipe)}\n")
        try:
            saved = self.storage.add_recipe(recipe)
        except DuplicateRecipeError:
            self._print(f'\n\tRecipe "{recipe.title}" already exists!\n')
            return None
        except RecipeBookError as exc:
            self._error(f'Error creating recipe "{recipe.title}"', exc)
            return None

        self._print(f'\n\tRecipe "{saved.title}" created successfully:\n{format_recipe(saved)}\n')
        return saved

    def list_recipes(self) -> List[Recipe]:
        self._print("\n\tListing all recipes...\n")
        try:
            recipes = list(self.storage.list_recipes())
        except RecipeBookError as exc:
            self._error("Error listing all recipes", exc)
            return []

        if not recipes:
            self._print("\n\tNo recipe found!\n")
            return recipes

        for index, recipe in enumerate(recipes, start=1):
            self._print(f"\t[{index}] Recipe #{index}:\n{format_recipe(recipe)}\n")
        return recipes

    def find_recipe(self, title: str) -> Optional[Recipe]:
        self._print(f'\n\tSearching for recipe "{title}"...\n')
        try:
            recipe = self.storage.find_by_title(title)
        except RecipeBookError as exc:
            self._error(f'Error finding recipe "{title}"', exc)
            return None

        if recipe is None:
            self._print(f'\n\tRecipe "{title}" not found!\n')
        else:
            self._print(f"\n\tRecipe Found:\n{format_recipe(recipe)}\n")
        return recipe

    def update_description(self, title: str, description: str) -> Optional[Recipe]:
        self._print(
            f'\n\tUpdating description for "{title}", new description "{description}"...\n'
        )
        try:
            recipe = self.storage.update_description(title, description)
        except RecipeBookError as exc:
            self._error(f'Error updating recipe "{title}"', exc)
            return None

        if recipe is None:
            self._print(f'\n\tRecipe "{title}" not updated!\n')
        else:
            self._print(f"\n\tRecipe updated successfully:\n{format_recipe(recipe)}\n")
        return recipe

    def delete_recipe(self, title: str) -> Optional[Recipe]:
        self._print(f'\n\tDeleting recipe "{title}"...\n')
        try:
            recipe = self.storage.delete_by_title(title)
        except RecipeBookError as exc:
            self._error(f'Error deleting recipe "{title}"', exc)
            return None

        if recipe is None:
            self._print(f'\n\tRecipe "{title}" not found or already deleted!\n')
        else:
            self._print(f'\n\tSuccessfully deleted recipe "{title}"\n')
        return recipe

    def _print(self, text: str) -> None:
        self.console.print(escape(text), highlight=False)

    def _error(self, message: str, exc: RecipeBookError) -> None:
        logger.debug("{}: {!r}", message, exc)
        self.console.print(f"[red]\n\t{escape(message)}:\n\t{escape(str(exc))}\n[/red]", highlight=False)


def run_command(storage: RecipeRepository, argv: Sequence[str], console: Console) -> None:
    CommandDispatcher(storage, console).dispatch(argv)


def main(
    argv: Optional[Sequence[str]] = None,
    storage: Optional[RecipeRepository] = None,
    console: Optional[Console] = None,
) -> int:
    """Run one recipebook command.

    Parameters
    ----------
    argv:
        Arguments after the program name. Defaults to ``sys.argv[1:]``.
    storage:
        Optional recipe repository. When ``None`` a
        :class:`~recipebook.gcp_storage.FirestoreRecipeStorage` is built from
        environment variables and connected for the duration of the command.
    console:
        Rich console receiving user-facing output.
    """

    load_dotenv()
    configure_logging(os.environ.get("RECIPES_LOG_LEVEL", DEFAULT_LOG_LEVEL))

    if argv is None:
        argv = sys.argv[1:]
    if console is None:
        console = Console()

    if storage is None:
        from .gcp_storage import FirestoreRecipeStorage

        storage = FirestoreRecipeStorage.from_env()
        storage.connect()

    target = getattr(storage, "target", None)
    try:
        run_command(storage, argv, console)
    finally:
        storage.close()

    if target is None:
        logger.info("Application exit. Storage connection closed.")
    else:
        logger.info('Application exit. Firestore "{}" connection closed.', target)
    return 0


__all__ = ["CommandDispatcher", "SAMPLE_RECIPE", "USAGE", "format_recipe", "main", "run_command"]
