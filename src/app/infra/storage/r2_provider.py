# src/app/infra/storage/r2_provider.py
"""
Cloudflare R2 file store implementation.
R2 is S3-compatible, so we use boto3 with custom endpoint.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from src.app.domain.errors import FileStoreError
from src.app.infra.storage.base import FileStore

logger = logging.getLogger(__name__)

# Signed view URLs are used only when the bucket has no public URL
SIGNED_URL_EXPIRES_SECONDS = 3600


class R2FileStore(FileStore):
    """
    Cloudflare R2 file store using boto3 (S3-compatible).

    Environment variables required:
    - R2_ACCOUNT_ID: Cloudflare account ID
    - R2_ACCESS_KEY_ID: R2 access key ID
    - R2_SECRET_ACCESS_KEY: R2 secret access key
    - R2_BUCKET_NAME: Name of the R2 bucket
    - R2_PUBLIC_URL: (Optional) Public URL for the bucket, enables image resizing previews
    """

    def __init__(
        self,
        account_id: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        bucket_name: Optional[str] = None,
        public_url: Optional[str] = None,
        client=None,
    ):
        self.account_id = account_id or os.getenv("R2_ACCOUNT_ID")
        self.access_key_id = access_key_id or os.getenv("R2_ACCESS_KEY_ID")
        self.secret_access_key = secret_access_key or os.getenv("R2_SECRET_ACCESS_KEY")
        self.bucket_name = bucket_name or os.getenv("R2_BUCKET_NAME")
        self.public_url = (public_url or os.getenv("R2_PUBLIC_URL") or "").rstrip("/")

        if not all([self.account_id, self.access_key_id, self.secret_access_key, self.bucket_name]):
            raise FileStoreError(
                "Missing R2 configuration. Required: R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, "
                "R2_SECRET_ACCESS_KEY, R2_BUCKET_NAME"
            )

        self.endpoint_url = f"https://{self.account_id}.r2.cloudflarestorage.com"

        self._client = client or boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=Config(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "adaptive"},
            ),
            region_name="auto",  # R2 uses 'auto' as region
        )

        logger.info(
            "R2FileStore initialized: bucket=%s, endpoint=%s",
            self.bucket_name,
            self.endpoint_url,
        )

    def upload_file(self, file_id: str, data: bytes, content_type: str) -> str:
        """Upload an object to R2."""
        try:
            self._client.put_object(
                Bucket=self.bucket_name,
                Key=file_id,
                Body=data,
                ContentType=content_type,
            )
            logger.info("Uploaded to R2: key=%s, size=%d bytes", file_id, len(data))
            return file_id

        except ClientError as e:
            logger.error("Failed to upload to R2: %s", e)
            raise FileStoreError(f"Failed to upload file: {e}") from e

    def get_view_url(self, file_id: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{file_id}"

        try:
            return self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={
                    "Bucket": self.bucket_name,
                    "Key": file_id,
                },
                ExpiresIn=SIGNED_URL_EXPIRES_SECONDS,
            )
        except ClientError as e:
            logger.error("Failed to generate signed GET URL: %s", e)
            raise FileStoreError(f"Failed to generate view URL: {e}") from e

    def get_preview_url(self, file_id: str, width: int, height: int) -> str:
        # Cloudflare image resizing only works through a public zone
        if not self.public_url:
            return self.get_view_url(file_id)
        return f"{self.public_url}/cdn-cgi/image/width={width},height={height},fit=cover/{file_id}"

    def delete_file(self, file_id: str) -> bool:
        """Delete an object from R2."""
        try:
            self._client.delete_object(
                Bucket=self.bucket_name,
                Key=file_id,
            )
            logger.info("Deleted object from R2: key=%s", file_id)
            return True

        except ClientError as e:
            logger.error("Failed to delete object from R2: %s", e)
            return False
