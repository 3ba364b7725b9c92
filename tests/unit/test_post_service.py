from __future__ import annotations

import pytest

from src.app.domain.errors import DocumentNotFoundError, DocumentStoreError
from src.app.domain.models import LookupStatus


@pytest.fixture
def author(services):
    return services.profiles.create_profile(user_id="u1", name="Maria", handle="maria")


class TestCreatePost:
    def test_new_post_has_zero_counters(self, services, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img.png", caption="Lunch")
        fetched = services.posts.get_post(post.id)
        assert fetched is not None
        assert fetched.likes_count == 0
        assert fetched.comments_count == 0
        assert fetched.is_recipe is False

    def test_is_recipe_is_kept(self, services, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img.png", caption="Soup", is_recipe=True, recipe_id="r1")
        fetched = services.posts.get_post(post.id)
        assert fetched.is_recipe is True
        assert fetched.recipe_id == "r1"

    def test_increments_author_posts_count(self, services, author) -> None:
        services.posts.create_post(user_id="u1", image="img.png", caption="Lunch")
        services.posts.create_post(user_id="u1", image="img.png", caption="Dinner")
        assert services.profiles.get_profile("u1").posts_count == 2

    def test_counter_failure_does_not_fail_create(self, services, store, author) -> None:
        store.fail_on.add(("update", "profiles"))
        post = services.posts.create_post(user_id="u1", image="img.png", caption="Lunch")
        assert services.posts.get_post(post.id) is not None
        assert services.profiles.get_profile("u1").posts_count == 0

    def test_primary_failure_propagates(self, services, store, author) -> None:
        store.fail_on.add(("create", "posts"))
        with pytest.raises(DocumentStoreError):
            services.posts.create_post(user_id="u1", image="img.png", caption="Lunch")
        assert services.profiles.get_profile("u1").posts_count == 0


class TestReadPosts:
    def test_missing_post(self, services) -> None:
        assert services.posts.get_post("nope") is None
        assert services.posts.lookup_post("nope").status == LookupStatus.NOT_FOUND

    def test_failed_read_is_distinguishable(self, services, store) -> None:
        store.fail_on.add("get")
        assert services.posts.lookup_post("nope").is_failed

    def test_list_newest_first(self, services, author) -> None:
        first = services.posts.create_post(user_id="u1", image="a", caption="first")
        second = services.posts.create_post(user_id="u1", image="b", caption="second")
        assert [p.id for p in services.posts.list_posts()] == [second.id, first.id]

    def test_list_filters(self, services, author) -> None:
        services.posts.create_post(user_id="u1", image="a", caption="plain")
        services.posts.create_post(user_id="u1", image="b", caption="recipe", is_recipe=True)
        services.posts.create_post(user_id="u2", image="c", caption="other")

        assert len(services.posts.list_posts(user_id="u1")) == 2
        assert [p.caption for p in services.posts.list_posts(is_recipe=True)] == ["recipe"]

    def test_list_following_ids(self, services, author) -> None:
        services.posts.create_post(user_id="u1", image="a", caption="mine")
        services.posts.create_post(user_id="u2", image="b", caption="friend")
        services.posts.create_post(user_id="u3", image="c", caption="stranger")

        feed = services.posts.list_posts(following_ids=["u2", "u3"])
        assert {p.caption for p in feed} == {"friend", "stranger"}
        assert services.posts.list_posts(user_id="u1", following_ids=["u2"]) == []
        assert [p.caption for p in services.posts.list_posts(user_id="u2", following_ids=["u2"])] == ["friend"]

    def test_list_paginates(self, services, author) -> None:
        for i in range(5):
            services.posts.create_post(user_id="u1", image="img", caption=f"post {i}")
        page = services.posts.list_posts(limit=2, offset=2)
        assert [p.caption for p in page] == ["post 2", "post 1"]

    def test_list_failure_returns_empty(self, services, store) -> None:
        store.fail_on.add("list")
        assert services.posts.list_posts() == []


class TestUpdateAndDeletePost:
    def test_update_keeps_untouched_fields(self, services, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img", caption="old", location="Lisbon")
        updated = services.posts.update_post(post.id, caption="new")
        assert updated.caption == "new"
        assert updated.location == "Lisbon"

    def test_update_rejects_other_fields(self, services, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img", caption="old")
        with pytest.raises(ValueError):
            services.posts.update_post(post.id, likes_count=99)

    def test_delete_decrements_posts_count(self, services, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img", caption="bye")
        services.posts.delete_post(post.id, "u1")
        assert services.posts.get_post(post.id) is None
        assert services.profiles.get_profile("u1").posts_count == 0

    def test_delete_missing_propagates(self, services, author) -> None:
        with pytest.raises(DocumentNotFoundError):
            services.posts.delete_post("nope", "u1")
