# src/app/queries/social.py
"""
Cached profile, follow, like and comment queries.

The follow and like toggles are optimistic: the cached status flips before
the remote call, is restored if the call fails, and the counters it touched
are invalidated once it succeeds.
"""
from __future__ import annotations

from functools import partial
from typing import Any, Optional

from src.app.cache.keys import comment_keys, follow_keys, like_keys, post_keys, profile_keys, recipe_keys
from src.app.cache.mutations import run_mutation
from src.app.cache.query_client import QueryClient, QueryState
from src.app.domain.errors import SelfFollowError
from src.app.domain.models import Comment, Profile, TargetType
from src.app.services.comment_service import CommentService
from src.app.services.follow_service import FollowService
from src.app.services.like_service import LikeService
from src.app.services.profile_service import ProfileService


class SocialQueries:
    def __init__(
        self,
        client: QueryClient,
        profiles: ProfileService,
        follows: FollowService,
        likes: LikeService,
        comments: CommentService,
    ):
        self._client = client
        self._profiles = profiles
        self._follows = follows
        self._likes = likes
        self._comments = comments

    # --- profiles ------------------------------------------------------

    async def profile(self, user_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            profile_keys.detail(user_id or ""),
            partial(self._profiles.get_profile, user_id),
            enabled=bool(user_id),
        )

    async def profile_by_handle(self, handle: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            profile_keys.handle(handle or ""),
            partial(self._profiles.get_profile_by_handle, handle),
            enabled=bool(handle),
        )

    async def followers(self, user_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            profile_keys.followers(user_id or ""),
            partial(self._follows.get_followers, user_id),
            enabled=bool(user_id),
        )

    async def following(self, user_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            profile_keys.following(user_id or ""),
            partial(self._follows.get_following, user_id),
            enabled=bool(user_id),
        )

    async def update_profile(self, document_id: str, **fields: Any) -> Profile:
        def on_success(profile: Profile, _ctx: Any) -> None:
            self._client.set_query_data(profile_keys.detail(profile.user_id), profile)
            self._client.invalidate_queries(profile_keys.details())

        return await run_mutation(
            partial(self._profiles.update_profile, document_id, **fields),
            on_success=on_success,
        )

    # --- follows -------------------------------------------------------

    async def is_following(self, follower_id: Optional[str], following_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            follow_keys.status(follower_id or "", following_id or ""),
            partial(self._follows.is_following, follower_id, following_id),
            enabled=bool(follower_id) and bool(following_id) and follower_id != following_id,
        )

    async def toggle_follow(self, follower_id: str, following_id: str) -> bool:
        """
        Raises:
            SelfFollowError: If both ids are the same; the cache is left untouched
        """
        if follower_id == following_id:
            raise SelfFollowError(follower_id)

        key = follow_keys.status(follower_id, following_id)

        def on_mutate() -> Optional[QueryState]:
            snapshot = self._client.get_query_state_snapshot(key)
            self._client.set_query_data(key, lambda old: not old)
            return snapshot

        def on_error(_error: Exception, snapshot: Optional[QueryState]) -> None:
            self._client.restore_query_state(key, snapshot)

        def on_success(state: bool, _ctx: Any) -> None:
            self._client.set_query_data(key, state)
            self._client.invalidate_queries(profile_keys.detail(follower_id))
            self._client.invalidate_queries(profile_keys.detail(following_id))
            self._client.invalidate_queries(profile_keys.followers(following_id))
            self._client.invalidate_queries(profile_keys.following(follower_id))

        return await run_mutation(
            partial(self._follows.toggle_follow, follower_id, following_id),
            on_mutate=on_mutate,
            on_error=on_error,
            on_success=on_success,
        )

    # --- likes ---------------------------------------------------------

    async def has_liked(
        self,
        user_id: Optional[str],
        target_type: TargetType | str,
        target_id: Optional[str],
    ) -> QueryState:
        return await self._client.fetch_query(
            like_keys.status(user_id or "", TargetType(target_type).value, target_id or ""),
            partial(self._likes.has_liked, user_id, target_type, target_id),
            enabled=bool(user_id) and bool(target_id),
        )

    async def toggle_like(self, user_id: str, target_type: TargetType | str, target_id: str) -> bool:
        kind = TargetType(target_type)
        key = like_keys.status(user_id, kind.value, target_id)

        def on_mutate() -> Optional[QueryState]:
            snapshot = self._client.get_query_state_snapshot(key)
            self._client.set_query_data(key, lambda old: not old)
            return snapshot

        def on_error(_error: Exception, snapshot: Optional[QueryState]) -> None:
            self._client.restore_query_state(key, snapshot)

        def on_success(state: bool, _ctx: Any) -> None:
            self._client.set_query_data(key, state)
            if kind == TargetType.POST:
                self._client.invalidate_queries(post_keys.detail(target_id))
            elif kind == TargetType.RECIPE:
                self._client.invalidate_queries(recipe_keys.detail(target_id))
            else:
                self._client.invalidate_queries(comment_keys.lists())

        return await run_mutation(
            partial(self._likes.toggle_like, user_id, kind, target_id),
            on_mutate=on_mutate,
            on_error=on_error,
            on_success=on_success,
        )

    # --- comments ------------------------------------------------------

    async def comments(self, post_id: Optional[str]) -> QueryState:
        return await self._client.fetch_query(
            comment_keys.list(post_id or ""),
            partial(self._comments.list_comments, post_id),
            enabled=bool(post_id),
        )

    def _invalidate_post_comments(self, post_id: str) -> None:
        self._client.invalidate_queries(comment_keys.list(post_id))
        self._client.invalidate_queries(post_keys.detail(post_id))

    async def create_comment(self, post_id: str, user_id: str, content: str) -> Comment:
        return await run_mutation(
            partial(self._comments.create_comment, post_id, user_id, content),
            on_success=lambda _comment, _ctx: self._invalidate_post_comments(post_id),
        )

    async def delete_comment(self, comment_id: str, post_id: str) -> None:
        await run_mutation(
            partial(self._comments.delete_comment, comment_id, post_id),
            on_success=lambda _result, _ctx: self._invalidate_post_comments(post_id),
        )
