from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from uuid import uuid4

from src.app.domain.errors import DuplicateUserError
from src.app.infra.db.base import Document, UserRepository

logger = logging.getLogger(__name__)


class MemoryUserRepository(UserRepository):
    """Process-local user store; contents are lost on restart."""

    def __init__(self) -> None:
        self._users: dict[str, Document] = {}

    def get_user(self, user_id: str) -> Optional[Document]:
        user = self._users.get(user_id)
        return dict(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[Document]:
        wanted = username.lower()
        for user in self._users.values():
            if str(user.get("username", "")).lower() == wanted:
                return dict(user)
        return None

    def create_user(self, data: Mapping[str, Any]) -> Document:
        username = str(data.get("username", ""))
        if self.get_user_by_username(username):
            raise DuplicateUserError(username)

        user_id = str(uuid4())
        user = {**data, "id": user_id}
        self._users[user_id] = user
        logger.info("Created local user: id=%s, username=%s", user_id, username)
        return dict(user)
