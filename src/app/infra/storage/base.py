# src/app/infra/storage/base.py
"""
Abstract base class for file stores.
This interface allows easy swapping between different storage backends (Supabase Storage, R2, ...)
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class FileStore(ABC):
    """
    Abstract interface for bucket-scoped file operations.

    Implementations:
    - SupabaseFileStore: Supabase Storage bucket
    - R2FileStore: Cloudflare R2 (S3-compatible)
    """

    bucket_name: str

    @abstractmethod
    def upload_file(
        self,
        file_id: str,
        data: bytes,
        content_type: str,
    ) -> str:
        """
        Upload binary content under the given id.

        Args:
            file_id: Key the file is stored under
            data: Raw file bytes
            content_type: MIME type of the content (e.g., "image/png")

        Returns:
            The stored file id
        """
        pass

    @abstractmethod
    def get_view_url(self, file_id: str) -> str:
        """
        Build a URL that serves the original file.
        """
        pass

    @abstractmethod
    def get_preview_url(self, file_id: str, width: int, height: int) -> str:
        """
        Build a URL that serves a resized preview of an image.

        Args:
            file_id: The stored file id
            width: Preview width in pixels
            height: Preview height in pixels
        """
        pass

    @abstractmethod
    def delete_file(self, file_id: str) -> bool:
        """
        Delete a file from the bucket.

        Returns:
            True if deletion was successful
        """
        pass
