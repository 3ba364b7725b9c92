# src/app/infra/auth/base.py
"""
Abstract base class for authentication providers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from src.app.domain.models import Principal


class AuthProvider(ABC):
    """
    Abstract interface for session-based authentication.

    Implementations:
    - SupabaseAuthProvider: Supabase GoTrue
    """

    @abstractmethod
    def create_session(self, email: str, password: str) -> Principal:
        """
        Sign in with email and password.

        Raises:
            AuthError: If the credentials are rejected or the call fails
        """
        pass

    @abstractmethod
    def get_current_principal(self) -> Optional[Principal]:
        """
        Return the principal of the active session, or None when signed out.
        """
        pass

    @abstractmethod
    def create_principal(self, email: str, password: str, name: str) -> Principal:
        """
        Register a new principal.

        Raises:
            AuthError: If registration is rejected
        """
        pass

    @abstractmethod
    def delete_session(self) -> None:
        """
        Sign out of the active session.
        """
        pass
