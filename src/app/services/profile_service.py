# src/app/services/profile_service.py
"""
Profile service.
Reads and writes public profiles and their denormalized counters.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from src.app.config import Collections, get_collections
from src.app.domain.errors import DocumentStoreError
from src.app.domain.models import CounterField, Lookup, Profile
from src.app.infra.db.base import DocumentStore
from src.app.services.counters import bump_counter
from src.app.services.records import row_to_profile

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "handle", "avatar", "bio"})


class ProfileService:
    """
    Service for profile documents.

    Responsibilities:
    - Look up profiles by auth user id or handle
    - Create the profile for a newly registered principal
    - Apply owner edits to name, handle, avatar and bio
    - Adjust follower/following/post/recipe counters
    """

    def __init__(
        self,
        store: DocumentStore,
        collections: Optional[Collections] = None,
    ):
        self._store = store
        self._collections = collections or get_collections()

    @property
    def collection(self) -> str:
        return self._collections.profiles

    def _lookup_by(self, field: str, value: str) -> Lookup[Profile]:
        try:
            rows = self._store.list_documents(self.collection, filters={field: value}, limit=1)
        except DocumentStoreError as error:
            logger.error("Error fetching profile by %s=%s: %s", field, value, error)
            return Lookup.failed(error)

        if not rows:
            return Lookup.not_found()
        return Lookup.found(row_to_profile(rows[0]))

    def lookup_profile(self, user_id: str) -> Lookup[Profile]:
        return self._lookup_by("user_id", user_id)

    def get_profile(self, user_id: str) -> Optional[Profile]:
        """
        Get the profile of an auth user.

        Returns:
            The profile, or None when it is absent or the call failed
        """
        return self.lookup_profile(user_id).value

    def get_profile_by_handle(self, handle: str) -> Optional[Profile]:
        return self._lookup_by("handle", handle).value

    def create_profile(
        self,
        user_id: str,
        name: str,
        handle: str,
        avatar: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Profile:
        data: dict[str, Any] = {
            "user_id": user_id,
            "name": name,
            "handle": handle,
            "bio": bio,
            "followers_count": 0,
            "following_count": 0,
            "posts_count": 0,
            "recipes_count": 0,
        }
        if avatar:
            data["avatar"] = avatar

        row = self._store.create_document(self.collection, data)
        profile = row_to_profile(row)
        logger.info("Created profile: id=%s, user=%s, handle=%s", profile.id, user_id, handle)
        return profile

    def update_profile(self, document_id: str, **fields: Any) -> Profile:
        """
        Merge owner-editable fields into a profile.

        Raises:
            ValueError: If a non-editable field is supplied
            DocumentStoreError: If the write fails
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable on a profile: {', '.join(sorted(unknown))}")

        row = self._store.update_document(self.collection, document_id, fields)
        return row_to_profile(row)

    def increment_counter(
        self,
        document_id: str,
        field: CounterField | str,
        increment: int = 1,
    ) -> Optional[int]:
        """
        Adjust one of the profile counters; failures are logged, not raised.

        Returns:
            The new counter value, or None if the update failed
        """
        counter = CounterField(field)
        return bump_counter(self._store, self.collection, document_id, counter.value, increment)

    def increment_counter_for_user(
        self,
        user_id: str,
        field: CounterField | str,
        increment: int = 1,
    ) -> Optional[int]:
        """Resolve the user's profile first; a missing profile is skipped."""
        profile = self.get_profile(user_id)
        if not profile:
            logger.warning("No profile for user %s, skipping %s update", user_id, CounterField(field).value)
            return None
        return self.increment_counter(profile.id, field, increment)
