"""
MinIO Content Store
===================

Content store backed by a MinIO bucket.

The MinIO SDK is synchronous, so every call runs in a worker thread.
Transient transport errors are retried, S3 errors are not.
"""

import asyncio
import io
import logging
from collections.abc import AsyncIterator

import urllib3
from minio import Minio
from minio.error import S3Error
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.shared.exceptions import StorageError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (urllib3.exceptions.HTTPError, ConnectionError, TimeoutError)
MISSING_OBJECT_CODES = {"NoSuchKey", "NoSuchObject"}

_retry_transient = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    reraise=True,
)


class MinioContentStore:
    """Wrapper around the MinIO client implementing ``ContentStore``."""

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        host: str,
        port: int,
        access_key: str,
        secret_key: str,
        secure: bool,
        bucket_name: str,
    ):
        self.client = Minio(
            endpoint=f"{host}:{port}",
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
        )
        self.bucket_name = bucket_name
        self._bucket_ready = False
        logger.debug(f"MinIO store initialized. Endpoint: {host}:{port}, Bucket: {self.bucket_name}")

    @_retry_transient
    def _ensure_bucket_exists(self) -> None:
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(self.bucket_name):
            self.client.make_bucket(self.bucket_name)
        self._bucket_ready = True

    @_retry_transient
    def _put(self, key: str, data: bytes, content_type: str) -> None:
        self._ensure_bucket_exists()
        self.client.put_object(
            bucket_name=self.bucket_name,
            object_name=key,
            data=io.BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

    @_retry_transient
    def _exists(self, key: str) -> bool:
        try:
            self.client.stat_object(self.bucket_name, key)
        except S3Error as e:
            if e.code in MISSING_OBJECT_CODES:
                return False
            raise
        return True

    @_retry_transient
    def _delete(self, key: str) -> None:
        self.client.remove_object(self.bucket_name, key)

    @_retry_transient
    def _open(self, key: str):
        return self.client.get_object(self.bucket_name, key)

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(self._put, key, data, content_type)
        except (S3Error, *TRANSIENT_ERRORS) as e:
            raise StorageError(f"Upload failed: {e}", key=key) from e

    async def exists(self, key: str) -> bool:
        try:
            return await asyncio.to_thread(self._exists, key)
        except (S3Error, *TRANSIENT_ERRORS) as e:
            raise StorageError(f"Existence check failed: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete, key)
        except (S3Error, *TRANSIENT_ERRORS) as e:
            raise StorageError(f"Delete failed: {e}", key=key) from e

    async def get_stream(self, key: str) -> AsyncIterator[bytes]:
        try:
            response = await asyncio.to_thread(self._open, key)
        except S3Error as e:
            raise StorageError(f"Storage Error: {e.code} - {e.message}", key=key) from e
        except TRANSIENT_ERRORS as e:
            raise StorageError(f"Download failed: {e}", key=key) from e

        try:
            while True:
                chunk = await asyncio.to_thread(response.read, self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            response.close()
            response.release_conn()
