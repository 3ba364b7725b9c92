from __future__ import annotations

import pytest

from src.app.domain.errors import SelfFollowError
from src.app.domain.models import Follow


@pytest.fixture
def people(services):
    services.profiles.create_profile(user_id="a", name="Ana", handle="ana")
    services.profiles.create_profile(user_id="b", name="Bia", handle="bia")


def _counts(services, user_id):
    profile = services.profiles.get_profile(user_id)
    return profile.followers_count, profile.following_count


class TestFollowService:
    def test_follow_updates_both_counters(self, services, people) -> None:
        follow = services.follows.follow("a", "b")
        assert isinstance(follow, Follow)
        assert services.follows.is_following("a", "b")
        assert not services.follows.is_following("b", "a")
        assert _counts(services, "a") == (0, 1)
        assert _counts(services, "b") == (1, 0)

    def test_follow_twice_is_noop(self, services, store, people) -> None:
        services.follows.follow("a", "b")
        assert services.follows.follow("a", "b") is None
        assert store.count("follows") == 1
        assert _counts(services, "b") == (1, 0)

    def test_toggle_twice_restores_state_and_counters(self, services, people) -> None:
        before = (services.follows.is_following("a", "b"), _counts(services, "a"), _counts(services, "b"))

        assert services.follows.toggle_follow("a", "b") is True
        assert services.follows.toggle_follow("a", "b") is False

        after = (services.follows.is_following("a", "b"), _counts(services, "a"), _counts(services, "b"))
        assert after == before

    def test_self_follow_raises_before_remote_calls(self, services, store, people) -> None:
        store.calls.clear()
        with pytest.raises(SelfFollowError):
            services.follows.toggle_follow("a", "a")
        with pytest.raises(SelfFollowError):
            services.follows.follow("a", "a")
        assert store.calls == []
        assert store.count("follows") == 0

    def test_unfollow_absent_is_noop(self, services, store, people) -> None:
        services.follows.unfollow("a", "b")
        assert store.calls_for("delete") == []
        assert _counts(services, "b") == (0, 0)

    def test_followers_and_following(self, services, people) -> None:
        services.profiles.create_profile(user_id="c", name="Cris", handle="cris")
        services.follows.follow("a", "b")
        services.follows.follow("c", "b")
        services.follows.follow("a", "c")

        assert set(services.follows.get_followers("b")) == {"a", "c"}
        assert set(services.follows.get_following("a")) == {"b", "c"}
        assert services.follows.get_following("b") == []

    def test_list_failure_returns_empty(self, services, store) -> None:
        store.fail_on.add("list")
        assert services.follows.get_followers("b") == []
        assert services.follows.is_following("a", "b") is False

    def test_missing_profiles_do_not_fail_follow(self, services, store) -> None:
        services.follows.follow("x", "y")
        assert store.count("follows") == 1
