# src/app/cache/mutations.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from src.app.cache.query_client import call_maybe_async

logger = logging.getLogger(__name__)


async def run_mutation(
    fn: Callable[[], Any],
    on_mutate: Optional[Callable[[], Any]] = None,
    on_error: Optional[Callable[[Exception, Any], None]] = None,
    on_success: Optional[Callable[[Any, Any], None]] = None,
) -> Any:
    """
    Run a remote write with cache hooks around it.

    on_mutate runs before fn and its return value is handed to the other
    hooks as context (the snapshot an optimistic update rolls back to).
    On failure on_error runs and the exception is re-raised.

    Returns:
        Whatever fn returned
    """
    context = on_mutate() if on_mutate else None

    try:
        result = await call_maybe_async(fn)
    except Exception as error:
        logger.warning("Mutation failed: %s", error)
        if on_error:
            on_error(error, context)
        raise

    if on_success:
        on_success(result, context)
    return result
