"""
Event Dispatcher
================

Fire-and-forget domain events for audit and notification consumers.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from src.shared.kernel.models.base import utcnow

logger = logging.getLogger(__name__)

DOCUMENT_CREATED = "document.created"
DOCUMENT_UPLOADED = "document.uploaded"
DOCUMENT_DELETED = "document.deleted"
FOLDER_CREATED = "folder.created"
FOLDER_RENAMED = "folder.renamed"
FOLDER_DELETED = "folder.deleted"
BULK_UPLOAD_COMPLETED = "bulk_upload.completed"


@dataclass
class DomainEvent:
    name: str
    owner_id: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        return {
            "event": self.name,
            "owner_id": self.owner_id,
            "payload": self.payload,
            "emitted_at": utcnow().isoformat(),
        }


class EventDispatcher:
    """
    Handles emission of domain events.

    Events are always logged. When a redis client is supplied they are also
    published on ``user:{owner_id}:events``. Publishing failures are logged
    and never reach the caller.
    """

    def __init__(self, redis_client: Any | None = None):
        self._redis = redis_client

    async def emit(self, name: str, owner_id: str, **payload: Any) -> None:
        event = DomainEvent(name=name, owner_id=owner_id, payload=payload)
        logger.info(f"Event {event.name} [Owner: {event.owner_id}]")
        if event.payload:
            logger.debug(f"Event payload: {event.payload}")

        if self._redis is None:
            return

        channel = f"user:{owner_id}:events"
        try:
            await self._redis.publish(channel, json.dumps(event.to_message(), default=str))
        except Exception as e:
            logger.warning(f"Failed to publish event {event.name} to Redis: {e}")

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()


def build_event_dispatcher(redis_url: str) -> EventDispatcher:
    """Create a dispatcher, publishing to Redis only when a URL is configured."""
    if not redis_url:
        return EventDispatcher()

    import redis.asyncio as redis

    return EventDispatcher(redis.Redis.from_url(redis_url))
