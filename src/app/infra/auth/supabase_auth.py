from __future__ import annotations

import logging
from typing import Any, Optional

from supabase import Client

from src.app.domain.errors import AuthError
from src.app.domain.models import Principal
from src.app.infra.auth.base import AuthProvider

logger = logging.getLogger(__name__)


def _user_to_principal(user: Any) -> Principal:
    # metadata may carry 'name'
    name = None
    meta = getattr(user, "user_metadata", None) or {}
    if isinstance(meta, dict):
        name = meta.get("name")
    return Principal(id=str(user.id), email=getattr(user, "email", None), name=name)


class SupabaseAuthProvider(AuthProvider):
    def __init__(self, client: Client):
        self._client = client

    def create_session(self, email: str, password: str) -> Principal:
        try:
            res = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning("Sign-in failed for %s: %s", email, e)
            raise AuthError("Invalid email or password") from e

        if not res.user:
            raise AuthError("Invalid email or password")
        return _user_to_principal(res.user)

    def get_current_principal(self) -> Optional[Principal]:
        try:
            res = self._client.auth.get_user()
        except Exception as e:
            logger.debug("No active session: %s", e)
            return None

        if not res or not res.user:
            return None
        return _user_to_principal(res.user)

    def create_principal(self, email: str, password: str, name: str) -> Principal:
        try:
            res = self._client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"name": name}},
                }
            )
        except Exception as e:
            logger.warning("Sign-up failed for %s: %s", email, e)
            raise AuthError(f"Registration failed: {e}") from e

        if not res.user:
            raise AuthError("Registration failed")
        return _user_to_principal(res.user)

    def delete_session(self) -> None:
        try:
            self._client.auth.sign_out()
        except Exception as e:
            logger.error("Sign-out failed: %s", e)
            raise AuthError("Logout failed") from e
