# src/app/services/storage_service.py
from __future__ import annotations

import logging

from src.app.domain.errors import InvalidImageError
from src.app.infra.storage.base import FileStore
from src.services.image_utils import (
    DEFAULT_MAX_SIZE_MB,
    generate_unique_filename,
    validate_image_file,
)

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 500


class StorageService:
    """Image uploads on top of a bucket-scoped FileStore."""

    def __init__(self, file_store: FileStore, max_size_mb: int = DEFAULT_MAX_SIZE_MB):
        self._files = file_store
        self._max_size_mb = max_size_mb

    def upload_image(self, data: bytes, filename: str, content_type: str) -> str:
        """
        Validate and upload an image under a generated unique name.

        Returns:
            The stored file id

        Raises:
            InvalidImageError: If the type or size is rejected (nothing is uploaded)
            FileStoreError: If the upload fails
        """
        validation = validate_image_file(content_type, len(data), self._max_size_mb)
        if not validation.valid:
            raise InvalidImageError(validation.error or "Invalid image file")

        file_id = generate_unique_filename(filename)
        stored = self._files.upload_file(file_id, data, content_type)
        logger.info("Uploaded image %s (%d bytes) to %s", stored, len(data), self._files.bucket_name)
        return stored

    def get_image_url(self, file_id: str) -> str:
        return self._files.get_view_url(file_id)

    def get_image_preview(self, file_id: str, width: int = PREVIEW_SIZE, height: int = PREVIEW_SIZE) -> str:
        return self._files.get_preview_url(file_id, width, height)

    def delete_image(self, file_id: str) -> bool:
        deleted = self._files.delete_file(file_id)
        if not deleted:
            logger.warning("Image %s was not deleted", file_id)
        return deleted
