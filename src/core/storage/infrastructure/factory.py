"""
Content Store Factory
=====================

Builds the configured content store once per process.
"""

import logging
from functools import lru_cache

from src.api.config import MinIOSettings, StorageSettings, get_settings
from src.core.storage.domain.ports.content_store import ContentStore
from src.core.storage.infrastructure.memory_store import InMemoryContentStore
from src.core.storage.infrastructure.minio_store import MinioContentStore

logger = logging.getLogger(__name__)


def build_content_store(storage: StorageSettings, minio: MinIOSettings) -> ContentStore:
    if storage.backend == "memory":
        logger.warning("Using in-memory content store; stored files are lost on restart")
        return InMemoryContentStore(
            simulated_latency_ms=storage.simulated_latency_ms,
            failure_rate=storage.failure_rate,
        )

    return MinioContentStore(
        host=minio.host,
        port=minio.port,
        access_key=minio.root_user,
        secret_key=minio.root_password,
        secure=minio.secure,
        bucket_name=minio.bucket_name,
    )


@lru_cache
def get_content_store() -> ContentStore:
    settings = get_settings()
    return build_content_store(settings.storage, settings.minio)
