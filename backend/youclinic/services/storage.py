"""
Object storage for lead attachments (MinIO / any S3-compatible store).

Uploads are two-step: the client asks for a presigned PUT URL, uploads the
file directly to the bucket, then registers the object key on the lead.
Downloads go through a presigned GET URL.
"""

import logging
import uuid
from datetime import timedelta
from functools import lru_cache

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from ..core.config import settings
from ..core.exceptions import StorageError


logger = logging.getLogger(__name__)

# S3 error responses and transport failures (unreachable endpoint, timeouts).
STORAGE_FAILURES = (S3Error, HTTPError)


def generate_object_key(prefix: str, filename: str) -> str:
    """
    Generate a unique object key.

    >>> generate_object_key("leads/abc", "scan 1.pdf")  # doctest: +SKIP
    'leads/abc/3f2a9c1b7e4d_scan1.pdf'
    """
    unique_id = uuid.uuid4().hex[:12]
    safe_filename = "".join(c for c in filename if c.isalnum() or c in "._-")
    return f"{prefix}/{unique_id}_{safe_filename}"


class FileStorage:
    """Thin wrapper over a Minio client bound to one bucket."""

    def __init__(self, client: Minio, bucket: str):
        self.client = client
        self.bucket = bucket

    def upload_url(self, object_key: str) -> str:
        try:
            return self.client.presigned_put_object(
                bucket_name=self.bucket,
                object_name=object_key,
                expires=timedelta(minutes=settings.upload_url_expire_minutes),
            )
        except STORAGE_FAILURES as e:
            logger.error("Failed to generate presigned PUT URL for %s: %s", object_key, e)
            raise StorageError() from e

    def download_url(self, object_key: str) -> str:
        try:
            return self.client.presigned_get_object(
                bucket_name=self.bucket,
                object_name=object_key,
                expires=timedelta(minutes=settings.download_url_expire_minutes),
            )
        except STORAGE_FAILURES as e:
            logger.error("Failed to generate presigned GET URL for %s: %s", object_key, e)
            raise StorageError() from e

    def delete(self, object_key: str) -> None:
        try:
            self.client.remove_object(bucket_name=self.bucket, object_name=object_key)
        except STORAGE_FAILURES as e:
            raise StorageError(f"Failed to delete object {object_key}: {e}") from e

    def delete_many(self, object_keys: list[str]) -> list[str]:
        """Delete each key, returning the keys that could not be removed."""
        failed = []
        for key in object_keys:
            try:
                self.delete(key)
            except StorageError as e:
                logger.warning("Orphaned storage object left behind: %s", e)
                failed.append(key)
        return failed


@lru_cache()
def _default_storage() -> FileStorage:
    client = Minio(
        settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_use_ssl,
    )
    return FileStorage(client, settings.minio_bucket)


def get_storage() -> FileStorage:
    """FastAPI dependency returning the configured storage backend."""
    return _default_storage()
