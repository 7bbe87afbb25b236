import json
from unittest.mock import AsyncMock

from src.core.events.dispatcher import (
    FOLDER_CREATED,
    EventDispatcher,
    build_event_dispatcher,
)


async def test_emit_without_redis_only_logs():
    dispatcher = EventDispatcher()

    await dispatcher.emit(FOLDER_CREATED, "user-1", folder_name="Work")
    await dispatcher.close()


async def test_emit_publishes_to_owner_channel():
    redis_client = AsyncMock()
    dispatcher = EventDispatcher(redis_client)

    await dispatcher.emit(FOLDER_CREATED, "user-1", folder_name="Work")

    channel, message = redis_client.publish.await_args.args
    assert channel == "user:user-1:events"
    body = json.loads(message)
    assert body["event"] == "folder.created"
    assert body["owner_id"] == "user-1"
    assert body["payload"] == {"folder_name": "Work"}
    assert "emitted_at" in body


async def test_publish_failure_does_not_propagate():
    redis_client = AsyncMock()
    redis_client.publish.side_effect = ConnectionError("redis down")
    dispatcher = EventDispatcher(redis_client)

    await dispatcher.emit(FOLDER_CREATED, "user-1")

    redis_client.publish.assert_awaited_once()


async def test_close_releases_client():
    redis_client = AsyncMock()
    dispatcher = EventDispatcher(redis_client)

    await dispatcher.close()

    redis_client.aclose.assert_awaited_once()


def test_build_without_url_has_no_redis():
    dispatcher = build_event_dispatcher("")

    assert dispatcher._redis is None
