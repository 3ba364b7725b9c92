# src/app/infra/storage/supabase_provider.py
"""
Supabase Storage file store.
Previews use Supabase image transformations on the public URL.
"""
from __future__ import annotations

import logging

from supabase import Client

from src.app.domain.errors import FileStoreError
from src.app.infra.storage.base import FileStore

logger = logging.getLogger(__name__)


class SupabaseFileStore(FileStore):
    def __init__(self, client: Client, bucket_name: str):
        self._client = client
        self.bucket_name = bucket_name
        logger.info("SupabaseFileStore initialized: bucket=%s", bucket_name)

    def _bucket(self):
        return self._client.storage.from_(self.bucket_name)

    def upload_file(self, file_id: str, data: bytes, content_type: str) -> str:
        try:
            self._bucket().upload(
                file_id,
                data,
                file_options={"content-type": content_type},
            )
        except Exception as e:
            logger.error("Failed to upload %s to bucket %s: %s", file_id, self.bucket_name, e)
            raise FileStoreError(f"Failed to upload file: {e}") from e

        logger.info("Uploaded file: bucket=%s, id=%s, size=%d bytes", self.bucket_name, file_id, len(data))
        return file_id

    def get_view_url(self, file_id: str) -> str:
        return self._bucket().get_public_url(file_id)

    def get_preview_url(self, file_id: str, width: int, height: int) -> str:
        return self._bucket().get_public_url(
            file_id,
            {"transform": {"width": width, "height": height}},
        )

    def delete_file(self, file_id: str) -> bool:
        try:
            self._bucket().remove([file_id])
            logger.info("Deleted file: bucket=%s, id=%s", self.bucket_name, file_id)
            return True
        except Exception as e:
            logger.error("Failed to delete %s from bucket %s: %s", file_id, self.bucket_name, e)
            return False
