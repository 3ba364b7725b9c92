# src/app/cache/query_client.py
"""
Keyed query cache.

Each query key maps to a QueryState holding the last known result and a
stale flag. Mutations mark key prefixes stale and the next fetch of a stale
key goes back to the service. Everything runs on one asyncio loop: blocking
service calls are pushed to the threadpool and awaited, and cache writes only
ever happen on the loop thread.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Optional

from starlette.concurrency import run_in_threadpool

from src.app.cache.keys import QueryKey, is_prefix, make_key
from src.app.domain.errors import QueryError

logger = logging.getLogger(__name__)

STATUS_IDLE = "idle"
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

QueryFn = Callable[[], Any]
PageFn = Callable[[int, int], Any]


async def call_maybe_async(fn: Callable[..., Any], *args: Any) -> Any:
    """Await coroutine functions directly; run plain callables in the threadpool."""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    result = await run_in_threadpool(fn, *args)
    if inspect.isawaitable(result):
        return await result
    return result


@dataclass
class InfiniteData:
    """Loaded pages of an infinite query; page i was fetched at offset i * limit."""
    limit: int
    pages: list[list[Any]] = field(default_factory=list)

    @property
    def page_params(self) -> list[int]:
        return list(range(len(self.pages)))

    @property
    def has_next_page(self) -> bool:
        # a short page marks the end of the data
        return bool(self.pages) and len(self.pages[-1]) == self.limit

    @property
    def items(self) -> list[Any]:
        return [item for page in self.pages for item in page]


@dataclass
class QueryState:
    key: QueryKey
    status: str = STATUS_IDLE
    data: Any = None
    error: Optional[BaseException] = None
    stale: bool = False
    updated_at: Optional[float] = None

    @property
    def is_success(self) -> bool:
        return self.status == STATUS_SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == STATUS_ERROR

    @property
    def has_next_page(self) -> bool:
        return isinstance(self.data, InfiniteData) and self.data.has_next_page

    def unwrap(self) -> Any:
        """
        Return the data, raising when the last fetch failed.

        Raises:
            QueryError: If the query is in the error state
        """
        if self.is_error:
            raise QueryError(self.key, str(self.error)) from self.error
        return self.data


class QueryClient:
    """
    In-memory query cache with prefix invalidation and in-flight deduplication.

    Failed fetches are stored as error states and never retried here; calling
    the fetch again is the retry.
    """

    def __init__(self) -> None:
        self._queries: dict[QueryKey, QueryState] = {}
        self._inflight: dict[QueryKey, tuple["asyncio.Task[QueryState]", int]] = {}
        # bumped on every invalidation; a fetch that started under an older
        # generation can no longer store its result as fresh
        self._generations: dict[QueryKey, int] = {}

    # ------------------------------------------------------------------
    # Direct cache access
    # ------------------------------------------------------------------

    def get_query_state(self, key: QueryKey) -> Optional[QueryState]:
        return self._queries.get(make_key(*key))

    def get_query_data(self, key: QueryKey) -> Any:
        state = self.get_query_state(key)
        return state.data if state else None

    def set_query_data(self, key: QueryKey, value: Any) -> Any:
        """
        Write data for a key, marking it fresh.

        value may be a callable; it then receives the current data (or None)
        and its return value is stored.
        """
        key = make_key(*key)
        state = self._queries.get(key)
        current = state.data if state else None
        data = value(current) if callable(value) else value

        self._queries[key] = QueryState(
            key=key,
            status=STATUS_SUCCESS,
            data=data,
            updated_at=time.time(),
        )
        return data

    def get_query_state_snapshot(self, key: QueryKey) -> Optional[QueryState]:
        """Copy of the current state for key, for restore_query_state."""
        state = self.get_query_state(key)
        return replace(state) if state else None

    def restore_query_state(self, key: QueryKey, snapshot: Optional[QueryState]) -> None:
        """Put back a snapshot taken earlier; a None snapshot removes the key."""
        key = make_key(*key)
        if snapshot is None:
            self._queries.pop(key, None)
        else:
            self._queries[key] = replace(snapshot)

    def is_stale(self, key: QueryKey) -> bool:
        state = self.get_query_state(key)
        return state is None or state.stale or not state.is_success

    def _generation(self, key: QueryKey) -> int:
        return self._generations.get(key, 0)

    def _matching_keys(self, prefix: QueryKey) -> list[QueryKey]:
        keys = set(self._queries) | set(self._inflight)
        return [key for key in keys if is_prefix(prefix, key)]

    def invalidate_queries(self, prefix: QueryKey) -> int:
        """
        Stale-mark every cached key starting with prefix; returns how many were marked.

        Fetches already in flight under the prefix are marked too: their
        results are stored stale and later fetches do not join them.
        """
        prefix = make_key(*prefix)
        count = 0
        for key in self._matching_keys(prefix):
            self._generations[key] = self._generation(key) + 1
            state = self._queries.get(key)
            if state is not None:
                state.stale = True
                count += 1
        logger.debug("Invalidated %d queries under %s", count, prefix)
        return count

    def remove_queries(self, prefix: QueryKey) -> int:
        prefix = make_key(*prefix)
        doomed = [key for key in self._queries if is_prefix(prefix, key)]
        for key in self._matching_keys(prefix):
            self._generations[key] = self._generation(key) + 1
        for key in doomed:
            del self._queries[key]
        logger.debug("Removed %d queries under %s", len(doomed), prefix)
        return len(doomed)

    def clear(self) -> None:
        for key in self._inflight:
            self._generations[key] = self._generation(key) + 1
        self._queries.clear()

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def _dedupe(self, key: QueryKey, run: Callable[[int], Awaitable[QueryState]]) -> QueryState:
        generation = self._generation(key)
        entry = self._inflight.get(key)
        if entry is not None and entry[1] == generation:
            return await entry[0]

        task = asyncio.ensure_future(run(generation))
        self._inflight[key] = (task, generation)
        try:
            return await task
        finally:
            entry = self._inflight.get(key)
            if entry is not None and entry[0] is task:
                del self._inflight[key]

    def _superseded(self, key: QueryKey, generation: int) -> bool:
        """True when key was invalidated since generation and a newer result is already stored."""
        if self._generation(key) == generation:
            return False
        current = self._queries.get(key)
        return current is not None and current.is_success and not current.stale

    def _store_success(self, key: QueryKey, data: Any, generation: int, stale: bool = False) -> QueryState:
        invalidated = self._generation(key) != generation
        state = QueryState(
            key=key,
            status=STATUS_SUCCESS,
            data=data,
            stale=stale or invalidated,
            updated_at=time.time(),
        )
        if invalidated:
            logger.debug("Query %s was invalidated while fetching", key)
        if not self._superseded(key, generation):
            self._queries[key] = state
        return state

    def _store_error(self, key: QueryKey, error: Exception, generation: int) -> QueryState:
        previous = self._queries.get(key)
        state = QueryState(
            key=key,
            status=STATUS_ERROR,
            data=previous.data if previous else None,
            error=error,
            stale=True,
            updated_at=time.time(),
        )
        if not self._superseded(key, generation):
            self._queries[key] = state
        return state

    async def fetch_query(self, key: QueryKey, fn: QueryFn, enabled: bool = True) -> QueryState:
        """
        Return cached fresh data for key, or fetch it with fn.

        A disabled query never calls fn and returns the current (possibly idle) state.
        """
        key = make_key(*key)
        state = self._queries.get(key)

        if not enabled:
            return state or QueryState(key=key)
        if state and state.is_success and not state.stale:
            return state

        async def run(generation: int) -> QueryState:
            try:
                data = await call_maybe_async(fn)
            except Exception as error:
                logger.warning("Query %s failed: %s", key, error)
                return self._store_error(key, error, generation)
            return self._store_success(key, data, generation)

        return await self._dedupe(key, run)

    async def fetch_infinite_query(
        self,
        key: QueryKey,
        fn: PageFn,
        limit: int,
        enabled: bool = True,
    ) -> QueryState:
        """
        Load the first page of an infinite query, fn(offset, limit).

        A stale infinite query refetches every page it had loaded, starting
        at page 0 and stopping early at a short page.
        """
        key = make_key(*key)
        state = self._queries.get(key)

        if not enabled:
            return state or QueryState(key=key)
        if state and state.is_success and not state.stale:
            return state

        loaded = 1
        if state and isinstance(state.data, InfiniteData) and state.data.pages:
            loaded = len(state.data.pages)

        async def run(generation: int) -> QueryState:
            data = InfiniteData(limit=limit)
            try:
                for page_index in range(loaded):
                    page = await call_maybe_async(fn, page_index * limit, limit)
                    data.pages.append(list(page))
                    if len(page) < limit:
                        break
            except Exception as error:
                logger.warning("Infinite query %s failed: %s", key, error)
                return self._store_error(key, error, generation)
            return self._store_success(key, data, generation)

        return await self._dedupe(key, run)

    async def fetch_next_page(self, key: QueryKey, fn: PageFn, limit: int) -> QueryState:
        """
        Append the next page, requested at offset len(pages) * limit.

        Does nothing once a short page has been seen.
        """
        key = make_key(*key)

        entry = self._inflight.get(key)
        if entry is not None:
            finished = await entry[0]
            return self._queries.get(key) or finished

        state = self._queries.get(key)
        if state is None or not isinstance(state.data, InfiniteData) or not state.data.pages:
            return await self.fetch_infinite_query(key, fn, limit)
        if not state.data.has_next_page:
            return state

        async def run(generation: int) -> QueryState:
            current = self._queries[key]
            offset = len(current.data.pages) * limit
            try:
                page = await call_maybe_async(fn, offset, limit)
            except Exception as error:
                logger.warning("Next page of %s at offset %d failed: %s", key, offset, error)
                return self._store_error(key, error, generation)

            data = InfiniteData(limit=limit, pages=[*current.data.pages, list(page)])
            return self._store_success(key, data, generation, stale=current.stale)

        return await self._dedupe(key, run)
