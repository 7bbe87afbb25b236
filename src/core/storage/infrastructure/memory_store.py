"""
In-Memory Content Store
=======================

Process-local content store for development and tests. Latency and a
random failure rate can be simulated to exercise error paths.
"""

import asyncio
import logging
import random
from collections.abc import AsyncIterator

from src.shared.exceptions import StorageError

logger = logging.getLogger(__name__)


class InMemoryContentStore:
    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        simulated_latency_ms: int = 0,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.simulated_latency_ms = simulated_latency_ms
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()

    async def _simulate(self, operation: str, key: str) -> None:
        if self.simulated_latency_ms:
            await asyncio.sleep(self.simulated_latency_ms / 1000)
        if self.failure_rate and self._rng.random() < self.failure_rate:
            logger.debug(f"Simulated {operation} failure for {key}")
            raise StorageError(f"Simulated {operation} failure", key=key)

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        await self._simulate("upload", key)
        self.objects[key] = (bytes(data), content_type)

    async def exists(self, key: str) -> bool:
        await self._simulate("exists", key)
        return key in self.objects

    async def delete(self, key: str) -> None:
        await self._simulate("delete", key)
        self.objects.pop(key, None)

    async def get_stream(self, key: str) -> AsyncIterator[bytes]:
        await self._simulate("download", key)
        if key not in self.objects:
            raise StorageError("Object not found", key=key)
        data, _ = self.objects[key]
        for start in range(0, len(data), self.CHUNK_SIZE):
            yield data[start : start + self.CHUNK_SIZE]
