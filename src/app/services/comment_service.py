# src/app/services/comment_service.py
from __future__ import annotations

import logging
from typing import Optional

from src.app.config import Collections, get_collections
from src.app.domain.errors import DocumentStoreError
from src.app.domain.models import Comment
from src.app.infra.db.base import DocumentStore
from src.app.services.counters import bump_counter
from src.app.services.post_service import PostService
from src.app.services.records import row_to_comment

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(
        self,
        store: DocumentStore,
        posts: PostService,
        collections: Optional[Collections] = None,
    ):
        self._store = store
        self._posts = posts
        self._collections = collections or get_collections()

    @property
    def collection(self) -> str:
        return self._collections.comments

    def list_comments(self, post_id: str, limit: int = 50, offset: int = 0) -> list[Comment]:
        try:
            rows = self._store.list_documents(
                self.collection,
                filters={"post_id": post_id},
                limit=limit,
                offset=offset,
            )
        except DocumentStoreError as error:
            logger.error("Error listing comments for post %s: %s", post_id, error)
            return []
        return [row_to_comment(row) for row in rows]

    def create_comment(self, post_id: str, user_id: str, content: str) -> Comment:
        row = self._store.create_document(
            self.collection,
            {
                "post_id": post_id,
                "user_id": user_id,
                "content": content,
                "likes_count": 0,
            },
        )
        comment = row_to_comment(row)
        logger.info("Created comment: id=%s, post=%s, user=%s", comment.id, post_id, user_id)

        self._bump_post_comments(post_id, 1)
        return comment

    def delete_comment(self, comment_id: str, post_id: str) -> None:
        self._store.delete_document(self.collection, comment_id)
        logger.info("Deleted comment: id=%s, post=%s", comment_id, post_id)

        self._bump_post_comments(post_id, -1)

    def _bump_post_comments(self, post_id: str, delta: int) -> None:
        post = self._posts.get_post(post_id)
        if not post:
            logger.warning("Post %s not found, skipping comments_count update", post_id)
            return
        bump_counter(self._store, self._posts.collection, post_id, "comments_count", delta)
