from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import pytest

from src.app.config import Collections
from src.app.deps import Services, build_services
from src.app.domain.errors import AuthError, DocumentNotFoundError, DocumentStoreError, FileStoreError
from src.app.domain.models import Principal
from src.app.infra.auth.base import AuthProvider
from src.app.infra.db.base import Document, DocumentStore
from src.app.infra.storage.base import FileStore
from src.app.session import SessionContext

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed store. Every created document gets a strictly later
    created_at so newest-first ordering is deterministic.

    Failures are injected through `fail_on`, holding either an operation
    name ("get", "list", "create", "update", "delete") or an
    (operation, collection) pair.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Document]] = defaultdict(dict)
        self.fail_on: set[Any] = set()
        self.calls: list[tuple[str, str]] = []
        self._seq = 0

    def _check(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        if operation in self.fail_on or (operation, collection) in self.fail_on:
            raise DocumentStoreError(operation, "injected failure")

    def calls_for(self, operation: str) -> list[str]:
        return [collection for op, collection in self.calls if op == operation]

    def get_document(self, collection: str, document_id: str) -> Document:
        self._check("get", collection)
        document = self.collections[collection].get(document_id)
        if document is None:
            raise DocumentNotFoundError(collection, document_id)
        return dict(document)

    def list_documents(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: str = "created_at",
        descending: bool = True,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Document]:
        self._check("list", collection)

        def matches(document: Document) -> bool:
            for field, value in (filters or {}).items():
                if isinstance(value, (list, tuple, set)):
                    if document.get(field) not in value:
                        return False
                elif document.get(field) != value:
                    return False
            return True

        rows = [dict(d) for d in self.collections[collection].values() if matches(d)]
        rows.sort(key=lambda d: d.get(order_by) or "", reverse=descending)

        start = offset or 0
        end = start + limit if limit is not None else None
        return rows[start:end]

    def create_document(self, collection: str, data: Mapping[str, Any]) -> Document:
        self._check("create", collection)
        self._seq += 1
        stamp = (BASE_TIME + timedelta(seconds=self._seq)).isoformat()
        document = {**data, "id": f"doc{self._seq}", "created_at": stamp, "updated_at": stamp}
        self.collections[collection][document["id"]] = document
        return dict(document)

    def update_document(self, collection: str, document_id: str, data: Mapping[str, Any]) -> Document:
        self._check("update", collection)
        document = self.collections[collection].get(document_id)
        if document is None:
            raise DocumentNotFoundError(collection, document_id)
        document.update(data)
        return dict(document)

    def delete_document(self, collection: str, document_id: str) -> None:
        self._check("delete", collection)
        if self.collections[collection].pop(document_id, None) is None:
            raise DocumentNotFoundError(collection, document_id)

    def count(self, collection: str) -> int:
        return len(self.collections[collection])


class StubAuthProvider(AuthProvider):
    def __init__(self) -> None:
        self.accounts: dict[str, tuple[str, Principal]] = {}
        self.current: Optional[Principal] = None
        self.fail_sign_out = False
        self._seq = 0

    def add_account(self, email: str, password: str, name: str = "Chef") -> Principal:
        self._seq += 1
        principal = Principal(id=f"user{self._seq}", email=email, name=name)
        self.accounts[email] = (password, principal)
        return principal

    def create_session(self, email: str, password: str) -> Principal:
        account = self.accounts.get(email)
        if not account or account[0] != password:
            raise AuthError("Invalid email or password")
        self.current = account[1]
        return account[1]

    def get_current_principal(self) -> Optional[Principal]:
        return self.current

    def create_principal(self, email: str, password: str, name: str) -> Principal:
        if email in self.accounts:
            raise AuthError("Registration failed: user already registered")
        return self.add_account(email, password, name)

    def delete_session(self) -> None:
        if self.fail_sign_out:
            raise AuthError("Logout failed")
        self.current = None


class StubFileStore(FileStore):
    def __init__(self, bucket_name: str = "images") -> None:
        self.bucket_name = bucket_name
        self.files: dict[str, tuple[bytes, str]] = {}
        self.fail_upload = False

    def upload_file(self, file_id: str, data: bytes, content_type: str) -> str:
        if self.fail_upload:
            raise FileStoreError("Failed to upload file: injected")
        self.files[file_id] = (data, content_type)
        return file_id

    def get_view_url(self, file_id: str) -> str:
        return f"https://files.test/{self.bucket_name}/{file_id}"

    def get_preview_url(self, file_id: str, width: int, height: int) -> str:
        return f"https://files.test/{self.bucket_name}/{file_id}?width={width}&height={height}"

    def delete_file(self, file_id: str) -> bool:
        return self.files.pop(file_id, None) is not None


@pytest.fixture
def collections() -> Collections:
    return Collections()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def auth_provider() -> StubAuthProvider:
    return StubAuthProvider()


@pytest.fixture
def file_store() -> StubFileStore:
    return StubFileStore()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext()


@pytest.fixture
def services(
    store: InMemoryDocumentStore,
    file_store: StubFileStore,
    auth_provider: StubAuthProvider,
    collections: Collections,
    session: SessionContext,
) -> Services:
    return build_services(store, file_store, auth_provider, collections=collections, session=session)
