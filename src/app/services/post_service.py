# src/app/services/post_service.py
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from src.app.config import Collections, get_collections
from src.app.domain.errors import DocumentNotFoundError, DocumentStoreError
from src.app.domain.models import CounterField, Lookup, Post
from src.app.infra.db.base import DocumentStore
from src.app.services.profile_service import ProfileService
from src.app.services.records import row_to_post

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"caption", "location", "tags"})


class PostService:
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
        return self._collections.posts

    def lookup_post(self, post_id: str) -> Lookup[Post]:
        try:
            row = self._store.get_document(self.collection, post_id)
        except DocumentNotFoundError:
            return Lookup.not_found()
        except DocumentStoreError as error:
            logger.error("Error fetching post %s: %s", post_id, error)
            return Lookup.failed(error)
        return Lookup.found(row_to_post(row))

    def get_post(self, post_id: str) -> Optional[Post]:
        return self.lookup_post(post_id).value

    def list_posts(
        self,
        user_id: Optional[str] = None,
        is_recipe: Optional[bool] = None,
        following_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Post]:
        """
        List posts newest first.

        following_ids restricts authors to that set (the home feed); combined
        with user_id only that author is kept when they are in the set.
        """
        filters: dict[str, Any] = {}

        if user_id:
            filters["user_id"] = user_id
        if is_recipe is not None:
            filters["is_recipe"] = is_recipe
        if following_ids:
            if user_id and user_id not in following_ids:
                return []
            if not user_id:
                filters["user_id"] = list(following_ids)

        try:
            rows = self._store.list_documents(
                self.collection,
                filters=filters,
                limit=limit or None,
                offset=offset or None,
            )
        except DocumentStoreError as error:
            logger.error("Error listing posts: %s", error)
            return []

        return [row_to_post(row) for row in rows]

    def create_post(
        self,
        user_id: str,
        image: str,
        caption: str,
        location: Optional[str] = None,
        is_recipe: bool = False,
        recipe_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> Post:
        data: dict[str, Any] = {
            "user_id": user_id,
            "image": image,
            "caption": caption,
            "location": location,
            "is_recipe": bool(is_recipe),
            "recipe_id": recipe_id,
            "tags": list(tags or []),
            "likes_count": 0,
            "comments_count": 0,
        }

        post = row_to_post(self._store.create_document(self.collection, data))
        logger.info("Created post: id=%s, user=%s, is_recipe=%s", post.id, user_id, post.is_recipe)

        self._profiles.increment_counter_for_user(user_id, CounterField.POSTS, 1)
        return post

    def update_post(self, post_id: str, **fields: Any) -> Post:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable on a post: {', '.join(sorted(unknown))}")

        row = self._store.update_document(self.collection, post_id, fields)
        return row_to_post(row)

    def delete_post(self, post_id: str, user_id: str) -> None:
        # Comments and likes on the post are left in place.
        self._store.delete_document(self.collection, post_id)
        logger.info("Deleted post: id=%s, user=%s", post_id, user_id)

        self._profiles.increment_counter_for_user(user_id, CounterField.POSTS, -1)
