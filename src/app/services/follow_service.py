# src/app/services/follow_service.py
from __future__ import annotations

import logging
from typing import Optional

from src.app.config import Collections, get_collections
from src.app.domain.errors import DocumentStoreError, SelfFollowError
from src.app.domain.models import CounterField, Follow
from src.app.infra.db.base import Document, DocumentStore
from src.app.services.profile_service import ProfileService
from src.app.services.records import row_to_follow

logger = logging.getLogger(__name__)


class FollowService:
    """
    Service for the follow graph.

    A follow is an ordered (follower_id, following_id) pair of auth user ids.
    Following someone bumps the follower's following_count and the
    followee's followers_count; unfollowing reverses both.
    """

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
        return self._collections.follows

    def _find_follow(self, follower_id: str, following_id: str) -> Optional[Document]:
        rows = self._store.list_documents(
            self.collection,
            filters={"follower_id": follower_id, "following_id": following_id},
            limit=1,
        )
        return rows[0] if rows else None

    def is_following(self, follower_id: str, following_id: str) -> bool:
        try:
            return self._find_follow(follower_id, following_id) is not None
        except DocumentStoreError as error:
            logger.error("Error checking follow %s -> %s: %s", follower_id, following_id, error)
            return False

    def follow(self, follower_id: str, following_id: str) -> Optional[Follow]:
        """
        Follow a user; a no-op when already following.

        Raises:
            SelfFollowError: If both ids are the same
        """
        if follower_id == following_id:
            raise SelfFollowError(follower_id)

        if self.is_following(follower_id, following_id):
            return None

        row = self._store.create_document(
            self.collection,
            {"follower_id": follower_id, "following_id": following_id},
        )
        logger.info("Follow created: %s -> %s", follower_id, following_id)

        self._adjust_counts(follower_id, following_id, 1)
        return row_to_follow(row)

    def unfollow(self, follower_id: str, following_id: str) -> None:
        try:
            existing = self._find_follow(follower_id, following_id)
            if not existing:
                return

            self._store.delete_document(self.collection, str(existing["id"]))
        except DocumentStoreError as error:
            logger.error("Error unfollowing %s -> %s: %s", follower_id, following_id, error)
            return

        logger.info("Follow removed: %s -> %s", follower_id, following_id)
        self._adjust_counts(follower_id, following_id, -1)

    def toggle_follow(self, follower_id: str, following_id: str) -> bool:
        """
        Flip the follow state with a read followed by a write.

        Returns:
            True if follower_id now follows following_id

        Raises:
            SelfFollowError: If both ids are the same (checked before any remote call)
        """
        if follower_id == following_id:
            raise SelfFollowError(follower_id)

        if self.is_following(follower_id, following_id):
            self.unfollow(follower_id, following_id)
            return False

        self.follow(follower_id, following_id)
        return True

    def get_following(self, user_id: str, limit: int = 50, offset: int = 0) -> list[str]:
        """Ids of the users user_id follows."""
        try:
            rows = self._store.list_documents(
                self.collection,
                filters={"follower_id": user_id},
                limit=limit,
                offset=offset,
            )
        except DocumentStoreError as error:
            logger.error("Error getting following list for %s: %s", user_id, error)
            return []
        return [str(row["following_id"]) for row in rows]

    def get_followers(self, user_id: str, limit: int = 50, offset: int = 0) -> list[str]:
        """Ids of the users following user_id."""
        try:
            rows = self._store.list_documents(
                self.collection,
                filters={"following_id": user_id},
                limit=limit,
                offset=offset,
            )
        except DocumentStoreError as error:
            logger.error("Error getting followers list for %s: %s", user_id, error)
            return []
        return [str(row["follower_id"]) for row in rows]

    def _adjust_counts(self, follower_id: str, following_id: str, delta: int) -> None:
        self._profiles.increment_counter_for_user(follower_id, CounterField.FOLLOWING, delta)
        self._profiles.increment_counter_for_user(following_id, CounterField.FOLLOWERS, delta)
