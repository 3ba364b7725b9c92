# src/app/session.py
"""
Explicit session context.

Holds the signed-in principal and their profile for one client session.
AuthService fills it after a successful login, registration or session
check and empties it on logout.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.app.domain.models import Principal, Profile


@dataclass
class SessionContext:
    principal: Optional[Principal] = None
    profile: Optional[Profile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.principal.id if self.principal else None

    def populate(self, principal: Principal, profile: Optional[Profile]) -> None:
        self.principal = principal
        self.profile = profile

    def clear(self) -> None:
        self.principal = None
        self.profile = None
