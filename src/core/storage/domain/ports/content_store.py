from collections.abc import AsyncIterator
from typing import Protocol


class ContentStore(Protocol):
    """
    Port for blob storage addressed by opaque keys.

    Implementations raise ``StorageError`` for any backend failure. A
    successful ``put`` is not proof of durability, callers verify with
    ``exists``.
    """

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Store bytes under a key, replacing any previous object."""
        ...

    async def exists(self, key: str) -> bool:
        """Return True if an object is stored under the key."""
        ...

    async def delete(self, key: str) -> None:
        """Remove the object stored under the key."""
        ...

    def get_stream(self, key: str) -> AsyncIterator[bytes]:
        """Stream the object content in chunks."""
        ...
