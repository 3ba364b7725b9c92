from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from uuid import uuid4

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from src.app.domain.errors import DocumentNotFoundError, DocumentStoreError
from src.app.infra.db.base import Document, DocumentStore

logger = logging.getLogger(__name__)

# PostgREST caps unbounded selects at this many rows by default
MAX_ROWS = 1000
FUNCTION_NOT_FOUND = "PGRST202"
INCREMENT_RPC = "increment_counter"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _is_missing_function(error: APIError) -> bool:
    return getattr(error, "code", None) == FUNCTION_NOT_FOUND or FUNCTION_NOT_FOUND in str(error)


class SupabaseDocumentStore(DocumentStore):
    """Documents are rows keyed by a text `id` column with created_at/updated_at timestamps."""

    def __init__(self, client: Client, atomic_counter_rpc: bool = False):
        self._client = client
        self._atomic_counter_rpc = atomic_counter_rpc
        logger.info("SupabaseDocumentStore initialized (atomic_counter_rpc=%s)", atomic_counter_rpc)

    def get_document(self, collection: str, document_id: str) -> Document:
        try:
            result = (
                self._client.table(collection)
                .select("*")
                .eq("id", document_id)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as error:
            logger.error("Error fetching %s/%s: %s", collection, document_id, error)
            raise DocumentStoreError("get", str(error)) from error

        if not result.data:
            raise DocumentNotFoundError(collection, document_id)
        return result.data[0]

    def list_documents(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: str = "created_at",
        descending: bool = True,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Document]:
        query = self._client.table(collection).select("*")

        for field, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set)):
                query = query.in_(field, list(value))
            else:
                query = query.eq(field, value)

        query = query.order(order_by, desc=descending)

        start = offset or 0
        if limit is not None:
            query = query.range(start, start + limit - 1)
        elif start:
            query = query.range(start, start + MAX_ROWS - 1)

        try:
            result = query.execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Error listing %s: %s", collection, error)
            raise DocumentStoreError("list", str(error)) from error

        return list(result.data or [])

    def create_document(self, collection: str, data: Mapping[str, Any]) -> Document:
        now = _now_utc().isoformat()
        payload: dict[str, Any] = {
            **data,
            "id": uuid4().hex,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = self._client.table(collection).insert(payload).execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Error creating document in %s: %s", collection, error)
            raise DocumentStoreError("create", str(error)) from error

        if not result.data:
            raise DocumentStoreError("create", f"insert into {collection} returned no rows")

        document = result.data[0]
        logger.debug("Created document: collection=%s, id=%s", collection, document.get("id"))
        return document

    def update_document(
        self,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
    ) -> Document:
        payload = {**data, "updated_at": _now_utc().isoformat()}

        try:
            result = (
                self._client.table(collection)
                .update(payload)
                .eq("id", document_id)
                .execute()
            )
        except (APIError, httpx.HTTPError) as error:
            logger.error("Error updating %s/%s: %s", collection, document_id, error)
            raise DocumentStoreError("update", str(error)) from error

        if not result.data:
            raise DocumentNotFoundError(collection, document_id)
        return result.data[0]

    def delete_document(self, collection: str, document_id: str) -> None:
        try:
            result = self._client.table(collection).delete().eq("id", document_id).execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Error deleting %s/%s: %s", collection, document_id, error)
            raise DocumentStoreError("delete", str(error)) from error

        if not result.data:
            raise DocumentNotFoundError(collection, document_id)
        logger.debug("Deleted document: collection=%s, id=%s", collection, document_id)

    def increment_field(
        self,
        collection: str,
        document_id: str,
        field: str,
        delta: int = 1,
    ) -> int:
        if self._atomic_counter_rpc:
            try:
                result = self._client.rpc(
                    INCREMENT_RPC,
                    {
                        "p_table": collection,
                        "p_id": document_id,
                        "p_field": field,
                        "p_delta": delta,
                    },
                ).execute()
                return int(result.data or 0)
            except APIError as error:
                if not _is_missing_function(error):
                    raise DocumentStoreError("increment", str(error)) from error
                # Older databases lack the function: disable it and fall back.
                logger.warning("%s RPC not available, using read-modify-write", INCREMENT_RPC)
                self._atomic_counter_rpc = False
            except httpx.HTTPError as error:
                raise DocumentStoreError("increment", str(error)) from error

        return super().increment_field(collection, document_id, field, delta)
