from __future__ import annotations

from src.app.cache.keys import (
    comment_keys,
    follow_keys,
    is_prefix,
    like_keys,
    make_key,
    post_keys,
    profile_keys,
    recipe_keys,
)
from src.app.domain.models import TargetType


class TestMakeKey:
    def test_dicts_are_order_independent(self) -> None:
        assert make_key("posts", {"a": 1, "b": 2}) == make_key("posts", {"b": 2, "a": 1})

    def test_none_values_are_dropped(self) -> None:
        assert make_key("posts", {"user_id": "u1", "limit": None}) == make_key("posts", {"user_id": "u1"})

    def test_lists_become_tuples(self) -> None:
        key = make_key("x", ["a", "b"])
        assert key == ("x", ("a", "b"))
        hash(key)


class TestKeyFactories:
    def test_post_keys_are_hierarchical(self) -> None:
        assert post_keys.all == ("posts",)
        assert post_keys.lists() == ("posts", "list")
        assert is_prefix(post_keys.lists(), post_keys.list({"user_id": "u1"}))
        assert is_prefix(post_keys.all, post_keys.explore())
        assert not is_prefix(post_keys.lists(), post_keys.explore())
        assert post_keys.detail("p1") == ("posts", "detail", "p1")

    def test_feed_key_joins_ids(self) -> None:
        assert post_keys.feed(["u1", "u2"]) == ("posts", "feed", "u1,u2")

    def test_profile_keys(self) -> None:
        assert profile_keys.detail("u1") == ("profiles", "detail", "u1")
        assert profile_keys.handle("maria") == ("profiles", "handle", "maria")
        assert profile_keys.followers("u1") == ("profiles", "followers", "u1")
        assert profile_keys.following("u1") == ("profiles", "following", "u1")

    def test_recipe_and_comment_keys(self) -> None:
        assert is_prefix(recipe_keys.lists(), recipe_keys.list({"infinite": True}))
        assert recipe_keys.detail("r1") == ("recipes", "detail", "r1")
        assert comment_keys.list("p1") == ("comments", "list", "p1")

    def test_status_keys(self) -> None:
        assert like_keys.status("u1", TargetType.POST, "p1") == ("likes", "status", "u1", "post", "p1")
        assert like_keys.status("u1", "post", "p1") == like_keys.status("u1", TargetType.POST, "p1")
        assert follow_keys.status("a", "b") == ("follows", "status", "a", "b")

    def test_is_prefix_requires_shorter_key(self) -> None:
        assert not is_prefix(("posts", "list", "x"), ("posts", "list"))
