# src/app/cache/keys.py
"""
Query key factories.

A query key is a tuple (collection tag, operation tag, *params). Keys are
hierarchical, so a shorter key is a prefix covering every longer key that
starts with it: invalidating post_keys.lists() reaches every
post_keys.list(...) entry.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

QueryKey = tuple


def _normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(
            sorted((str(k), _normalize(v)) for k, v in value.items() if v is not None)
        )
    if isinstance(value, (list, tuple)):
        return tuple(_normalize(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(_normalize(v) for v in value))
    return value


def make_key(*parts: Any) -> QueryKey:
    """Build a hashable key; dict parts become sorted item tuples with None values dropped."""
    return tuple(_normalize(p) for p in parts)


def is_prefix(prefix: QueryKey, key: QueryKey) -> bool:
    return len(prefix) <= len(key) and key[: len(prefix)] == prefix


class ProfileKeys:
    all: QueryKey = ("profiles",)

    def details(self) -> QueryKey:
        return make_key(*self.all, "detail")

    def detail(self, user_id: str) -> QueryKey:
        return make_key(*self.details(), user_id)

    def handle(self, handle: str) -> QueryKey:
        return make_key(*self.all, "handle", handle)

    def followers(self, user_id: str) -> QueryKey:
        return make_key(*self.all, "followers", user_id)

    def following(self, user_id: str) -> QueryKey:
        return make_key(*self.all, "following", user_id)


class PostKeys:
    all: QueryKey = ("posts",)

    def lists(self) -> QueryKey:
        return make_key(*self.all, "list")

    def list(self, filters: Optional[Mapping[str, Any]] = None) -> QueryKey:
        return make_key(*self.lists(), filters or {})

    def feed(self, following_ids: Iterable[str]) -> QueryKey:
        return make_key(*self.all, "feed", ",".join(following_ids))

    def explore(self) -> QueryKey:
        return make_key(*self.all, "explore")

    def details(self) -> QueryKey:
        return make_key(*self.all, "detail")

    def detail(self, post_id: str) -> QueryKey:
        return make_key(*self.details(), post_id)


class RecipeKeys:
    all: QueryKey = ("recipes",)

    def lists(self) -> QueryKey:
        return make_key(*self.all, "list")

    def list(self, filters: Optional[Mapping[str, Any]] = None) -> QueryKey:
        return make_key(*self.lists(), filters or {})

    def details(self) -> QueryKey:
        return make_key(*self.all, "detail")

    def detail(self, recipe_id: str) -> QueryKey:
        return make_key(*self.details(), recipe_id)


class CommentKeys:
    all: QueryKey = ("comments",)

    def lists(self) -> QueryKey:
        return make_key(*self.all, "list")

    def list(self, post_id: str) -> QueryKey:
        return make_key(*self.lists(), post_id)


class LikeKeys:
    all: QueryKey = ("likes",)

    def status(self, user_id: str, target_type: str, target_id: str) -> QueryKey:
        return make_key(*self.all, "status", user_id, str(getattr(target_type, "value", target_type)), target_id)


class FollowKeys:
    all: QueryKey = ("follows",)

    def status(self, follower_id: str, following_id: str) -> QueryKey:
        return make_key(*self.all, "status", follower_id, following_id)


profile_keys = ProfileKeys()
post_keys = PostKeys()
recipe_keys = RecipeKeys()
comment_keys = CommentKeys()
like_keys = LikeKeys()
follow_keys = FollowKeys()
