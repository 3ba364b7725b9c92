# src/app/services/counters.py
"""
Best-effort maintenance of denormalized counters.

Counter updates run after the primary write has already succeeded and are
never rolled back together with it, so a failure here leaves the counter
stale until something rewrites it.
"""
from __future__ import annotations

import logging
from typing import Optional

from src.app.domain.errors import DocumentStoreError
from src.app.infra.db.base import DocumentStore

logger = logging.getLogger(__name__)


def bump_counter(
    store: DocumentStore,
    collection: str,
    document_id: str,
    field: str,
    delta: int,
) -> Optional[int]:
    """
    Apply a delta to a counter field, logging instead of raising on failure.

    Returns:
        The new value, or None when the update failed
    """
    try:
        new_value = store.increment_field(collection, document_id, field, delta)
    except DocumentStoreError as error:
        logger.warning(
            "Counter update failed: %s/%s %s%+d: %s",
            collection, document_id, field, delta, error,
        )
        return None

    logger.debug("Counter updated: %s/%s %s=%d", collection, document_id, field, new_value)
    return new_value
