# src/app/services/auth_service.py
"""
Authentication service.
Wraps the auth provider and keeps every principal paired with a profile.
"""
from __future__ import annotations

import logging
from typing import Optional

from src.app.domain.errors import AuthError, DocumentStoreError
from src.app.domain.models import Principal, Profile
from src.app.infra.auth.base import AuthProvider
from src.app.services.profile_service import ProfileService
from src.app.session import SessionContext
from src.services.handles import handle_from_email, unique_handle

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        auth_provider: AuthProvider,
        profiles: ProfileService,
        session: Optional[SessionContext] = None,
    ):
        self._auth = auth_provider
        self._profiles = profiles
        self.session = session or SessionContext()

    def login(self, email: str, password: str) -> Profile:
        """
        Sign in and return the user's profile, creating it on first login.

        Raises:
            AuthError: If the credentials are rejected or the profile cannot be created
        """
        principal = self._auth.create_session(email, password)
        profile = self.ensure_profile(principal.id, principal.name or email.split("@")[0], principal.email or email)
        self.session.populate(principal, profile)
        logger.info("User logged in: %s", principal.id)
        return profile

    def register(self, email: str, password: str, name: str) -> Profile:
        """
        Register a principal, open a session for it and create its profile.

        Raises:
            AuthError: If registration or the follow-up sign-in fails
        """
        self._auth.create_principal(email, password, name)
        principal = self._auth.create_session(email, password)
        profile = self.ensure_profile(principal.id, name, email)
        self.session.populate(principal, profile)
        logger.info("User registered: %s", principal.id)
        return profile

    def check_session(self) -> Optional[Profile]:
        principal = self._auth.get_current_principal()
        if not principal:
            self.session.clear()
            return None

        profile = self._profiles.get_profile(principal.id)
        self.session.populate(principal, profile)
        return profile

    def logout(self) -> None:
        try:
            self._auth.delete_session()
        finally:
            self.session.clear()
        logger.info("User logged out")

    def get_current_user(self) -> Optional[Principal]:
        return self._auth.get_current_principal()

    def ensure_profile(self, user_id: str, name: str, email: str) -> Profile:
        """
        Return the profile of user_id, creating one when it does not exist.

        The handle comes from the email local part; a random suffix is added
        when that handle is already taken.

        Raises:
            AuthError: If the profile cannot be read or created
        """
        lookup = self._profiles.lookup_profile(user_id)
        if lookup.is_found and lookup.value:
            return lookup.value
        if lookup.is_failed:
            raise AuthError("Could not load your profile. Please try again.")

        handle = handle_from_email(email)
        if self._profiles.get_profile_by_handle(handle):
            handle = unique_handle(handle)

        try:
            return self._profiles.create_profile(user_id=user_id, name=name, handle=handle)
        except DocumentStoreError as e:
            logger.error("Failed to create profile for %s: %s", user_id, e)
            raise AuthError("Could not create your profile. Please try again.") from e
