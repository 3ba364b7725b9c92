from __future__ import annotations

import asyncio

import pytest

from src.app.cache.keys import comment_keys, follow_keys, like_keys, post_keys, profile_keys, recipe_keys
from src.app.cache.query_client import QueryClient
from src.app.deps import build_queries
from src.app.domain.errors import SelfFollowError
from src.app.queries.posts import PostQueries
from src.app.queries.social import SocialQueries


@pytest.fixture
def queries(services):
    return build_queries(services, QueryClient())


@pytest.fixture
def author(services):
    return services.profiles.create_profile(user_id="u1", name="Maria", handle="maria")


class RecordingLikes:
    """Like service double that records the cached status seen at call time."""

    def __init__(self, client: QueryClient, fail: bool = False):
        self._client = client
        self.fail = fail
        self.liked = False
        self.seen_during_call = []

    def has_liked(self, user_id, target_type, target_id):
        return self.liked

    def toggle_like(self, user_id, target_type, target_id):
        self.seen_during_call.append(
            self._client.get_query_data(like_keys.status(user_id, target_type, target_id))
        )
        if self.fail:
            raise RuntimeError("network down")
        return True


class TestPostQueries:
    def test_post_detail_is_cached(self, queries, services, store, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img", caption="Lunch")
        store.calls.clear()

        async def scenario():
            await queries.posts.post(post.id)
            return await queries.posts.post(post.id)

        state = asyncio.run(scenario())
        assert state.data.id == post.id
        assert store.calls_for("get") == ["posts"]

    def test_create_post_invalidates_lists_and_explore(self, queries, author) -> None:
        client = queries.client

        async def scenario():
            await queries.posts.user_posts("u1")
            await queries.posts.explore()
            await queries.posts.create_post(user_id="u1", image="img", caption="New")

        asyncio.run(scenario())
        assert client.is_stale(post_keys.list({"user_id": "u1"}))
        assert client.is_stale(post_keys.explore())

    def test_delete_post_removes_detail(self, queries, services, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img", caption="Bye")

        async def scenario():
            await queries.posts.post(post.id)
            await queries.posts.delete_post(post.id, "u1")

        asyncio.run(scenario())
        assert queries.client.get_query_state(post_keys.detail(post.id)) is None

    def test_feed_pagination_stops_at_short_page(self, services, store, author) -> None:
        for i in range(15):
            services.posts.create_post(user_id="u2", image="img", caption=f"post {i}")
        posts = PostQueries(QueryClient(), services.posts, feed_page_size=10)
        store.calls.clear()

        async def scenario():
            first = await posts.feed(["u2"])
            assert len(first.data.pages[0]) == 10
            await posts.feed_next_page(["u2"])
            return await posts.feed_next_page(["u2"])

        state = asyncio.run(scenario())
        assert [len(p) for p in state.data.pages] == [10, 5]
        assert store.calls_for("list") == ["posts", "posts"]

    def test_feed_disabled_without_follows(self, queries, store) -> None:
        state = asyncio.run(queries.posts.feed([]))
        assert state.status == "idle"
        assert store.calls_for("list") == []

    def test_default_page_sizes(self, queries) -> None:
        assert queries.posts.feed_page_size == 10
        assert queries.posts.explore_page_size == 20
        assert queries.recipes.page_size == 10


class TestRecipeQueries:
    def test_update_recipe_invalidates_detail_and_lists(self, queries, services, author) -> None:
        recipe = services.recipes.create_recipe(
            author_id="u1",
            title="Soup",
            description="Warm",
            ingredients=["water"],
            steps=[{"order": 1, "instruction": "Boil"}],
            prep_time=1,
            cook_time=2,
            difficulty="Easy",
        )

        async def scenario():
            await queries.recipes.recipe(recipe.id)
            await queries.recipes.infinite_recipes(author_id="u1")
            await queries.recipes.update_recipe(recipe.id, title="Better soup")
            return await queries.recipes.recipe(recipe.id)

        state = asyncio.run(scenario())
        assert state.data.title == "Better soup"
        assert queries.client.is_stale(recipe_keys.list({"author_id": "u1", "infinite": True}))


class TestSocialQueries:
    def test_optimistic_like_flips_before_call(self) -> None:
        client = QueryClient()
        likes = RecordingLikes(client)
        social = SocialQueries(client, profiles=None, follows=None, likes=likes, comments=None)
        key = like_keys.status("u1", "post", "p1")
        client.set_query_data(key, False)

        assert asyncio.run(social.toggle_like("u1", "post", "p1")) is True
        assert likes.seen_during_call == [True]
        assert client.is_stale(post_keys.detail("p1"))

    def test_optimistic_like_reverts_on_failure(self) -> None:
        client = QueryClient()
        likes = RecordingLikes(client, fail=True)
        social = SocialQueries(client, profiles=None, follows=None, likes=likes, comments=None)
        key = like_keys.status("u1", "post", "p1")
        client.set_query_data(key, False)

        with pytest.raises(RuntimeError):
            asyncio.run(social.toggle_like("u1", "post", "p1"))

        assert likes.seen_during_call == [True]
        assert client.get_query_data(key) is False

    def test_failed_like_without_cached_status_leaves_no_entry(self) -> None:
        client = QueryClient()
        likes = RecordingLikes(client, fail=True)
        social = SocialQueries(client, profiles=None, follows=None, likes=likes, comments=None)
        key = like_keys.status("u1", "post", "p1")

        with pytest.raises(RuntimeError):
            asyncio.run(social.toggle_like("u1", "post", "p1"))
        assert client.get_query_state(key) is None

        likes.liked = True
        state = asyncio.run(social.has_liked("u1", "post", "p1"))
        assert state.is_success
        assert state.data is True

    def test_failed_like_keeps_stale_flag(self) -> None:
        client = QueryClient()
        social = SocialQueries(client, profiles=None, follows=None, likes=RecordingLikes(client, fail=True), comments=None)
        key = like_keys.status("u1", "post", "p1")
        client.set_query_data(key, False)
        client.invalidate_queries(key)

        with pytest.raises(RuntimeError):
            asyncio.run(social.toggle_like("u1", "post", "p1"))
        assert client.get_query_data(key) is False
        assert client.is_stale(key)

    def test_like_status_takes_the_service_result(self) -> None:
        client = QueryClient()
        social = SocialQueries(client, profiles=None, follows=None, likes=RecordingLikes(client), comments=None)
        key = like_keys.status("u1", "post", "p1")
        # cache says liked, remote did not have the like
        client.set_query_data(key, True)

        assert asyncio.run(social.toggle_like("u1", "post", "p1")) is True
        assert client.get_query_data(key) is True
        assert not client.is_stale(key)

    def test_comment_like_invalidates_comment_lists(self) -> None:
        client = QueryClient()
        social = SocialQueries(client, profiles=None, follows=None, likes=RecordingLikes(client), comments=None)
        client.set_query_data(comment_keys.list("p1"), [])

        asyncio.run(social.toggle_like("u1", "comment", "c1"))
        assert client.is_stale(comment_keys.list("p1"))

    def test_toggle_follow_updates_status_and_invalidates(self, queries, services) -> None:
        services.profiles.create_profile(user_id="a", name="Ana", handle="ana")
        services.profiles.create_profile(user_id="b", name="Bia", handle="bia")
        client = queries.client

        async def scenario():
            await queries.social.is_following("a", "b")
            await queries.social.profile("b")
            await queries.social.followers("b")
            await queries.social.following("a")
            now_following = await queries.social.toggle_follow("a", "b")
            refreshed = await queries.social.profile("b")
            return now_following, refreshed

        now_following, refreshed = asyncio.run(scenario())
        assert now_following is True
        assert client.get_query_data(follow_keys.status("a", "b")) is True
        assert refreshed.data.followers_count == 1
        assert client.is_stale(profile_keys.followers("b"))
        assert client.is_stale(profile_keys.following("a"))

    def test_self_follow_leaves_cache_untouched(self, queries) -> None:
        client = queries.client
        client.set_query_data(follow_keys.status("a", "a"), False)
        with pytest.raises(SelfFollowError):
            asyncio.run(queries.social.toggle_follow("a", "a"))
        assert client.get_query_data(follow_keys.status("a", "a")) is False

    def test_is_following_disabled_for_self(self, queries, store) -> None:
        state = asyncio.run(queries.social.is_following("a", "a"))
        assert state.status == "idle"
        assert store.calls == []

    def test_update_profile_sets_detail(self, queries, services) -> None:
        profile = services.profiles.create_profile(user_id="u1", name="Maria", handle="maria")

        updated = asyncio.run(queries.social.update_profile(profile.id, bio="Cook"))

        assert updated.bio == "Cook"
        assert queries.client.get_query_data(profile_keys.detail("u1")).bio == "Cook"

    def test_create_comment_invalidates_comments_and_post(self, queries, services, author) -> None:
        post = services.posts.create_post(user_id="u1", image="img", caption="Lunch")
        client = queries.client

        async def scenario():
            await queries.social.comments(post.id)
            await queries.posts.post(post.id)
            await queries.social.create_comment(post.id, "u2", "Yum")
            comments = await queries.social.comments(post.id)
            detail = await queries.posts.post(post.id)
            return comments, detail

        comments, detail = asyncio.run(scenario())
        assert [c.content for c in comments.data] == ["Yum"]
        assert detail.data.comments_count == 1
        assert not client.is_stale(comment_keys.list(post.id))

    def test_profile_by_handle(self, queries, services) -> None:
        services.profiles.create_profile(user_id="u1", name="Maria", handle="maria")
        state = asyncio.run(queries.social.profile_by_handle("maria"))
        assert state.data.user_id == "u1"
