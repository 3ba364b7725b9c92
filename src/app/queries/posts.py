# src/app/queries/posts.py
from __future__ import annotations

from functools import partial
from typing import Any, Optional, Sequence

from src.app.cache.keys import post_keys
from src.app.cache.mutations import run_mutation
from src.app.cache.query_client import QueryClient, QueryState
from src.app.config import get_settings
from src.app.domain.models import Post
from src.app.services.post_service import PostService

USER_POSTS_LIMIT = 50


class PostQueries:
    """Cached reads and invalidating writes for posts."""

    def __init__(
        self,
        client: QueryClient,
        posts: PostService,
        feed_page_size: Optional[int] = None,
        explore_page_size: Optional[int] = None,
    ):
        s = get_settings()
        self._client = client
        self._posts = posts
        self.feed_page_size = feed_page_size or s.FEED_PAGE_SIZE
        self.explore_page_size = explore_page_size or s.EXPLORE_PAGE_SIZE

    # --- reads ---------------------------------------------------------

    async def post(self, post_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            post_keys.detail(post_id or ""),
            partial(self._posts.get_post, post_id),
            enabled=bool(post_id),
        )

    async def posts(
        self,
        user_id: Optional[str] = None,
        is_recipe: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> QueryState:
        filters = {"user_id": user_id, "is_recipe": is_recipe, "limit": limit}
        return await self._client.fetch_query(
            post_keys.list(filters),
            partial(self._posts.list_posts, user_id=user_id, is_recipe=is_recipe, limit=limit),
        )

    async def user_posts(self, user_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            post_keys.list({"user_id": user_id}),
            partial(self._posts.list_posts, user_id=user_id, limit=USER_POSTS_LIMIT),
            enabled=bool(user_id),
        )

    def _feed_page(self, following_ids: Sequence[str]):
        ids = list(following_ids)

        def fetch(offset: int, limit: int) -> list[Post]:
            return self._posts.list_posts(following_ids=ids, limit=limit, offset=offset)

        return fetch

    async def feed(self, following_ids: Sequence[str]) -> QueryState:
        """Home feed of followed authors; disabled while following nobody."""
        return await self._client.fetch_infinite_query(
            post_keys.feed(following_ids),
            self._feed_page(following_ids),
            limit=self.feed_page_size,
            enabled=len(following_ids) > 0,
        )

    async def feed_next_page(self, following_ids: Sequence[str]) -> QueryState:
        return await self._client.fetch_next_page(
            post_keys.feed(following_ids),
            self._feed_page(following_ids),
            limit=self.feed_page_size,
        )

    def _explore_page(self, offset: int, limit: int) -> list[Post]:
        return self._posts.list_posts(limit=limit, offset=offset)

    async def explore(self) -> QueryState:
        return await self._client.fetch_infinite_query(
            post_keys.explore(),
            self._explore_page,
            limit=self.explore_page_size,
        )

    async def explore_next_page(self) -> QueryState:
        return await self._client.fetch_next_page(
            post_keys.explore(),
            self._explore_page,
            limit=self.explore_page_size,
        )

    # --- writes --------------------------------------------------------

    async def create_post(self, **data: Any) -> Post:
        def on_success(_post: Post, _ctx: Any) -> None:
            self._client.invalidate_queries(post_keys.lists())
            self._client.invalidate_queries(post_keys.explore())

        return await run_mutation(partial(self._posts.create_post, **data), on_success=on_success)

    async def update_post(self, post_id: str, **fields: Any) -> Post:
        def on_success(_post: Post, _ctx: Any) -> None:
            self._client.invalidate_queries(post_keys.detail(post_id))
            self._client.invalidate_queries(post_keys.lists())

        return await run_mutation(partial(self._posts.update_post, post_id, **fields), on_success=on_success)

    async def delete_post(self, post_id: str, user_id: str) -> None:
        def on_success(_result: Any, _ctx: Any) -> None:
            self._client.remove_queries(post_keys.detail(post_id))
            self._client.invalidate_queries(post_keys.lists())
            self._client.invalidate_queries(post_keys.explore())

        await run_mutation(partial(self._posts.delete_post, post_id, user_id), on_success=on_success)
