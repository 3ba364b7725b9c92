# src/app/services/recipe_service.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from src.app.config import Collections, get_collections
from src.app.domain.errors import DocumentNotFoundError, DocumentStoreError
from src.app.domain.models import CounterField, Difficulty, Lookup, Recipe, RecipeStep
from src.app.infra.db.base import DocumentStore
from src.app.services.profile_service import ProfileService
from src.app.services.records import parse_steps, row_to_recipe, serialize_steps

logger = logging.getLogger(__name__)

# author_id and likes_count are owned by create and the like counter
EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "image",
    "ingredients",
    "steps",
    "prep_time",
    "cook_time",
    "difficulty",
    "calories",
    "servings",
    "tags",
})

StepInput = RecipeStep | dict[str, Any] | str


class RecipeService:
    def __init__(
        self,
        store: DocumentStore,
        profiles: ProfileService,
        collections: Optional[Collections] = None,
    ):
        self._store = store
        self._profiles = profiles
        self._collections = collections or get_collections()

    @property
    def collection(self) -> str:
        return self._collections.recipes

    def lookup_recipe(self, recipe_id: str) -> Lookup[Recipe]:
        try:
            row = self._store.get_document(self.collection, recipe_id)
        except DocumentNotFoundError:
            return Lookup.not_found()
        except DocumentStoreError as error:
            logger.error("Error fetching recipe %s: %s", recipe_id, error)
            return Lookup.failed(error)
        return Lookup.found(row_to_recipe(row))

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return self.lookup_recipe(recipe_id).value

    def list_recipes(
        self,
        author_id: Optional[str] = None,
        difficulty: Optional[Difficulty | str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Recipe]:
        filters: dict[str, Any] = {}
        if author_id:
            filters["author_id"] = author_id
        if difficulty:
            filters["difficulty"] = Difficulty(difficulty).value

        try:
            rows = self._store.list_documents(
                self.collection,
                filters=filters,
                limit=limit or None,
                offset=offset or None,
            )
        except DocumentStoreError as error:
            logger.error("Error listing recipes: %s", error)
            return []

        return [row_to_recipe(row) for row in rows]

    def create_recipe(
        self,
        author_id: str,
        title: str,
        description: str,
        ingredients: list[str],
        steps: Iterable[StepInput],
        prep_time: int,
        cook_time: int,
        difficulty: Difficulty | str,
        image: Optional[str] = None,
        calories: Optional[int] = None,
        servings: Optional[int] = None,
        tags: Optional[list[str]] = None,
    ) -> Recipe:
        data: dict[str, Any] = {
            "author_id": author_id,
            "title": title,
            "description": description,
            "image": image,
            "ingredients": list(ingredients),
            "steps": serialize_steps(steps),
            "prep_time": prep_time,
            "cook_time": cook_time,
            "difficulty": Difficulty(difficulty).value,
            "calories": calories,
            "servings": servings,
            "tags": list(tags or []),
            "likes_count": 0,
        }

        recipe = row_to_recipe(self._store.create_document(self.collection, data))
        logger.info("Created recipe: id=%s, author=%s, steps=%d", recipe.id, author_id, len(recipe.steps))

        self._profiles.increment_counter_for_user(author_id, CounterField.RECIPES, 1)
        return recipe

    def update_recipe(self, recipe_id: str, **fields: Any) -> Recipe:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable on a recipe: {', '.join(sorted(unknown))}")

        data = dict(fields)
        if data.get("steps") is not None:
            data["steps"] = serialize_steps(data["steps"])
        if data.get("difficulty") is not None:
            data["difficulty"] = Difficulty(data["difficulty"]).value

        row = self._store.update_document(self.collection, recipe_id, data)
        return row_to_recipe(row)

    def delete_recipe(self, recipe_id: str, author_id: str) -> None:
        self._store.delete_document(self.collection, recipe_id)
        logger.info("Deleted recipe: id=%s, author=%s", recipe_id, author_id)

        self._profiles.increment_counter_for_user(author_id, CounterField.RECIPES, -1)

    @staticmethod
    def parse_steps(raw_steps: Iterable[str]) -> list[RecipeStep]:
        return parse_steps(raw_steps)
