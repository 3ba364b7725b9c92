# src/app/queries/recipes.py
from __future__ import annotations

from functools import partial
from typing import Any, Optional

from src.app.cache.keys import recipe_keys
from src.app.cache.mutations import run_mutation
from src.app.cache.query_client import QueryClient, QueryState
from src.app.config import get_settings
from src.app.domain.models import Recipe
from src.app.services.recipe_service import RecipeService


class RecipeQueries:
    def __init__(
        self,
        client: QueryClient,
        recipes: RecipeService,
        page_size: Optional[int] = None,
    ):
        self._client = client
        self._recipes = recipes
        self.page_size = page_size or get_settings().RECIPES_PAGE_SIZE

    async def recipe(self, recipe_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            recipe_keys.detail(recipe_id or ""),
            partial(self._recipes.get_recipe, recipe_id),
            enabled=bool(recipe_id),
        )

    async def recipes(
        self,
        author_id: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> QueryState:
        filters = {"author_id": author_id, "difficulty": difficulty, "limit": limit}
        return await self._client.fetch_query(
            recipe_keys.list(filters),
            partial(self._recipes.list_recipes, author_id=author_id, difficulty=difficulty, limit=limit),
        )

    def _infinite_key(self, author_id: Optional[str], difficulty: Optional[str]):
        return recipe_keys.list({"author_id": author_id, "difficulty": difficulty, "infinite": True})

    def _page(self, author_id: Optional[str], difficulty: Optional[str]):
        def fetch(offset: int, limit: int) -> list[Recipe]:
            return self._recipes.list_recipes(
                author_id=author_id,
                difficulty=difficulty,
                limit=limit,
                offset=offset,
            )

        return fetch

    async def infinite_recipes(
        self,
        author_id: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> QueryState:
        return await self._client.fetch_infinite_query(
            self._infinite_key(author_id, difficulty),
            self._page(author_id, difficulty),
            limit=self.page_size,
        )

    async def recipes_next_page(
        self,
        author_id: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> QueryState:
        return await self._client.fetch_next_page(
            self._infinite_key(author_id, difficulty),
            self._page(author_id, difficulty),
            limit=self.page_size,
        )

    async def create_recipe(self, **data: Any) -> Recipe:
        def on_success(_recipe: Recipe, _ctx: Any) -> None:
            self._client.invalidate_queries(recipe_keys.lists())

        return await run_mutation(partial(self._recipes.create_recipe, **data), on_success=on_success)

    async def update_recipe(self, recipe_id: str, **fields: Any) -> Recipe:
        def on_success(_recipe: Recipe, _ctx: Any) -> None:
            self._client.invalidate_queries(recipe_keys.detail(recipe_id))
            self._client.invalidate_queries(recipe_keys.lists())

        return await run_mutation(
            partial(self._recipes.update_recipe, recipe_id, **fields),
            on_success=on_success,
        )

    async def delete_recipe(self, recipe_id: str, author_id: str) -> None:
        def on_success(_result: Any, _ctx: Any) -> None:
            self._client.remove_queries(recipe_keys.detail(recipe_id))
            self._client.invalidate_queries(recipe_keys.lists())

        await run_mutation(partial(self._recipes.delete_recipe, recipe_id, author_id), on_success=on_success)
