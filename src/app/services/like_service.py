# src/app/services/like_service.py
"""
Like service.

Uniqueness of (user, target_type, target_id) is enforced by checking for an
existing like before creating one. Two concurrent likes of the same target
can both pass the check; the store has no unique constraint to stop them.
"""
from __future__ import annotations

import logging
from typing import Optional

from src.app.config import Collections, get_collections
from src.app.domain.errors import DocumentStoreError
from src.app.domain.models import Like, TargetType
from src.app.infra.db.base import Document, DocumentStore
from src.app.services.counters import bump_counter
from src.app.services.records import row_to_like

logger = logging.getLogger(__name__)


class LikeService:
    def __init__(
        self,
        store: DocumentStore,
        collections: Optional[Collections] = None,
    ):
        self._store = store
        self._collections = collections or get_collections()

    @property
    def collection(self) -> str:
        return self._collections.likes

    def _target_collection(self, target_type: TargetType) -> str:
        return {
            TargetType.POST: self._collections.posts,
            TargetType.RECIPE: self._collections.recipes,
            TargetType.COMMENT: self._collections.comments,
        }[target_type]

    def _find_like(self, user_id: str, target_type: TargetType, target_id: str) -> Optional[Document]:
        rows = self._store.list_documents(
            self.collection,
            filters={
                "user_id": user_id,
                "target_type": target_type.value,
                "target_id": target_id,
            },
            limit=1,
        )
        return rows[0] if rows else None

    def has_liked(self, user_id: str, target_type: TargetType | str, target_id: str) -> bool:
        kind = TargetType(target_type)
        try:
            return self._find_like(user_id, kind, target_id) is not None
        except DocumentStoreError as error:
            logger.error("Error checking like %s/%s by %s: %s", kind.value, target_id, user_id, error)
            return False

    def like(self, user_id: str, target_type: TargetType | str, target_id: str) -> Optional[Like]:
        """
        Like a target; a no-op when the user already likes it.

        Returns:
            The created like, or None when nothing was created
        """
        kind = TargetType(target_type)
        if self.has_liked(user_id, kind, target_id):
            return None

        row = self._store.create_document(
            self.collection,
            {"user_id": user_id, "target_type": kind.value, "target_id": target_id},
        )
        logger.info("Liked: user=%s, %s=%s", user_id, kind.value, target_id)

        bump_counter(self._store, self._target_collection(kind), target_id, "likes_count", 1)
        return row_to_like(row)

    def unlike(self, user_id: str, target_type: TargetType | str, target_id: str) -> None:
        kind = TargetType(target_type)
        try:
            existing = self._find_like(user_id, kind, target_id)
            if not existing:
                return

            self._store.delete_document(self.collection, str(existing["id"]))
        except DocumentStoreError as error:
            logger.error("Error unliking %s/%s by %s: %s", kind.value, target_id, user_id, error)
            return

        logger.info("Unliked: user=%s, %s=%s", user_id, kind.value, target_id)
        bump_counter(self._store, self._target_collection(kind), target_id, "likes_count", -1)

    def toggle_like(self, user_id: str, target_type: TargetType | str, target_id: str) -> bool:
        """
        Flip the like state with a read followed by a write.

        Returns:
            True if the target is now liked
        """
        kind = TargetType(target_type)
        if self.has_liked(user_id, kind, target_id):
            self.unlike(user_id, kind, target_id)
            return False

        self.like(user_id, kind, target_id)
        return True
