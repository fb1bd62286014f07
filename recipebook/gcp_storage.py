from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from google.api_core import exceptions as gcloud_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from loguru import logger

from .exceptions import DuplicateRecipeError, StorageError, StorageUnavailableError
from .models import Recipe, validate_recipe
from .storage import RecipeRepository

DEFAULT_DATABASE = "(default)"
DEFAULT_COLLECTION = "recipes"

T = TypeVar("T")


class FirestoreRecipeStorage(RecipeRepository):
    """Recipe storage backed by a Firestore collection.

    The client is created by :meth:`connect` and released by :meth:`close`;
    the instance is also a context manager doing both. Lookups use the
    ``title`` field. Every check-then-write sequence runs inside one
    Firestore transaction, which keeps titles unique across concurrent
    invocations.
    """

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        database: str = DEFAULT_DATABASE,
        collection_name: str = DEFAULT_COLLECTION,
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._database = database
        self._collection_name = collection_name

        self._firestore_client = client
        self._collection = client.collection(collection_name) if client is not None else None

    @classmethod
    def from_env(cls) -> "FirestoreRecipeStorage":
        """Build a storage instance from environment variables."""

        project = os.environ.get("GCP_PROJECT")
        database = os.environ.get("FIRESTORE_DATABASE", DEFAULT_DATABASE)
        collection_name = os.environ.get("RECIPES_COLLECTION", DEFAULT_COLLECTION)
        return cls(project=project, database=database, collection_name=collection_name)

    @property
    def target(self) -> str:
        project = self._project or "<default project>"
        return f"projects/{project}/databases/{self._database}/{self._collection_name}"

    @property
    def connected(self) -> bool:
        return self._collection is not None

    def connect(self) -> None:
        """Create the Firestore client.

        A failure is logged and leaves the storage disconnected; operations
        then raise :class:`StorageUnavailableError`.
        """

        if self.connected:
            return

        try:
            self._firestore_client = firestore.Client(
                project=self._project, database=self._database
            )
        except (auth_exceptions.GoogleAuthError, gcloud_exceptions.GoogleAPIError, OSError, ValueError) as exc:
            logger.error('Failed to connect to Firestore "{}". Error: {}', self.target, exc)
            return

        self._collection = self._firestore_client.collection(self._collection_name)
        logger.info('Connected to Firestore "{}" successfully!', self.target)

    def close(self) -> None:
        if self._firestore_client is None:
            return

        self._firestore_client.close()
        self._firestore_client = None
        self._collection = None
        logger.info('Firestore "{}" connection closed.', self.target)

    def __enter__(self) -> "FirestoreRecipeStorage":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def find_by_title(self, title: str) -> Optional[Recipe]:
        snapshots = self._run("find", title, lambda: list(self._title_query(title).stream()))
        if not snapshots:
            return None
        return self._snapshot_to_recipe(snapshots[0])

    def list_recipes(self) -> Iterable[Recipe]:
        snapshots = self._run("list", None, lambda: list(self._require_collection().stream()))
        return [self._snapshot_to_recipe(snapshot) for snapshot in snapshots]

    def add_recipe(self, recipe: Recipe) -> Recipe:
        doc = {
            "title": recipe.title,
            "description": recipe.description,
            "ingredients": list(recipe.ingredients),
            "instructions": recipe.instructions,
            "prep_time_in_minutes": recipe.prep_time_in_minutes,
            "created_at": firestore.SERVER_TIMESTAMP,
        }

        @firestore.transactional
        def create_if_absent(transaction: firestore.Transaction) -> firestore.DocumentReference:
            if list(transaction.get(self._title_query(recipe.title))):
                raise DuplicateRecipeError(recipe.title)

            validate_recipe(recipe)
            doc_ref = self._require_collection().document()
            transaction.create(doc_ref, doc)
            return doc_ref

        def insert() -> firestore.DocumentSnapshot:
            doc_ref = create_if_absent(self._require_client().transaction())
            return doc_ref.get()

        return self._snapshot_to_recipe(self._run("insert", recipe.title, insert))

    def update_description(self, title: str, description: str) -> Optional[Recipe]:
        @firestore.transactional
        def replace_description(
            transaction: firestore.Transaction,
        ) -> Optional[firestore.DocumentReference]:
            snapshots = list(transaction.get(self._title_query(title)))
            if not snapshots:
                return None

            doc_ref = snapshots[0].reference
            transaction.update(doc_ref, {"description": description})
            return doc_ref

        def update() -> Optional[firestore.DocumentSnapshot]:
            doc_ref = replace_description(self._require_client().transaction())
            return doc_ref.get() if doc_ref is not None else None

        snapshot = self._run("update", title, update)
        return self._snapshot_to_recipe(snapshot) if snapshot is not None else None

    def delete_by_title(self, title: str) -> Optional[Recipe]:
        @firestore.transactional
        def remove(transaction: firestore.Transaction) -> Optional[firestore.DocumentSnapshot]:
            snapshots = list(transaction.get(self._title_query(title)))
            if not snapshots:
                return None

            transaction.delete(snapshots[0].reference)
            return snapshots[0]

        snapshot = self._run("delete", title, lambda: remove(self._require_client().transaction()))
        return self._snapshot_to_recipe(snapshot) if snapshot is not None else None

    def _run(self, operation: str, title: Optional[str], call: Callable[[], T]) -> T:
        try:
            return call()
        except gcloud_exceptions.GoogleAPIError as exc:
            subject = f' for "{title}"' if title is not None else ""
            logger.error("Firestore {} failed{}: {}", operation, subject, exc)
            raise StorageError(str(exc)) from exc

    def _require_client(self) -> firestore.Client:
        if self._firestore_client is None:
            raise StorageUnavailableError(f'Not connected to Firestore "{self.target}".')
        return self._firestore_client

    def _require_collection(self) -> firestore.CollectionReference:
        if self._collection is None:
            raise StorageUnavailableError(f'Not connected to Firestore "{self.target}".')
        return self._collection

    def _title_query(self, title: str) -> firestore.Query:
        return self._require_collection().where(filter=FieldFilter("title", "==", title)).limit(1)

    def _snapshot_to_recipe(self, snapshot: firestore.DocumentSnapshot) -> Recipe:
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

    def _doc_to_recipe(self, doc_id: str, data: dict) -> Recipe:
        ingredients = data.get("ingredients")
        if isinstance(ingredients, list):
            parsed_ingredients: List[str] = [str(item) for item in ingredients]
        else:
            parsed_ingredients = []

        created_at = data.get("created_at")
        if isinstance(created_at, datetime):
            timestamp = created_at
        else:
            timestamp = None

        return Recipe(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description"),
            ingredients=parsed_ingredients,
            instructions=data.get("instructions", ""),
            prep_time_in_minutes=data.get("prep_time_in_minutes"),
            created_at=timestamp,
        )


__all__ = ["FirestoreRecipeStorage"]
