# src/app/infra/db/base.py
"""
Abstract base class for the remote document store.
This interface allows easy swapping between different BaaS backends.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

Document = dict[str, Any]


def apply_counter_delta(current: int, delta: int) -> int:
    """Increments add freely; decrements never go below zero."""
    if delta < 0:
        return max(0, current + delta)
    return current + delta


class DocumentStore(ABC):
    """
    Abstract interface for per-collection document operations.

    Implementations:
    - SupabaseDocumentStore: PostgREST tables behind Supabase
    - Future: AppwriteDocumentStore, FirestoreDocumentStore
    """

    @abstractmethod
    def get_document(self, collection: str, document_id: str) -> Document:
        """
        Fetch a single document by id.

        Args:
            collection: Collection (table) name
            document_id: The document id

        Returns:
            The document as a dict

        Raises:
            DocumentNotFoundError: If no document has this id
            DocumentStoreError: On any remote failure
        """
        pass

    @abstractmethod
    def list_documents(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: str = "created_at",
        descending: bool = True,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Document]:
        """
        List documents matching equality filters.

        A list or tuple filter value matches any of its members.

        Args:
            collection: Collection (table) name
            filters: Field -> value equality filters
            order_by: Field to sort by
            descending: Sort direction (newest first by default)
            limit: Max documents to return
            offset: Pagination offset

        Returns:
            List of documents
        """
        pass

    @abstractmethod
    def create_document(self, collection: str, data: Mapping[str, Any]) -> Document:
        """
        Create a document. The store assigns id, created_at and updated_at.

        Returns:
            The created document
        """
        pass

    @abstractmethod
    def update_document(
        self,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
    ) -> Document:
        """
        Merge the supplied fields into an existing document (last write wins).

        Returns:
            The updated document
        """
        pass

    @abstractmethod
    def delete_document(self, collection: str, document_id: str) -> None:
        """
        Delete a document by id.

        Raises:
            DocumentNotFoundError: If no document has this id
        """
        pass

    def increment_field(
        self,
        collection: str,
        document_id: str,
        field: str,
        delta: int = 1,
    ) -> int:
        """
        Read-modify-write a numeric field.

        There is no concurrency check between the read and the write, so
        concurrent increments on the same document can lose updates.

        Returns:
            The value written
        """
        document = self.get_document(collection, document_id)
        current = int(document.get(field) or 0)
        new_value = apply_counter_delta(current, delta)
        self.update_document(collection, document_id, {field: new_value})
        return new_value


class UserRepository(ABC):
    """
    Abstract interface for the local API's user records.
    """

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[Document]:
        """Return the stored user, or None."""
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[Document]:
        """Return the user with this username, or None."""
        pass

    @abstractmethod
    def create_user(self, data: Mapping[str, Any]) -> Document:
        """
        Store a new user and return it with its assigned id.

        Raises:
            DuplicateUserError: If the username is taken
        """
        pass
