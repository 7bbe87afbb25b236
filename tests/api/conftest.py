import os

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("STORAGE_BACKEND", "memory")

from src.api.deps import get_session_factory, get_storage  # noqa: E402
from src.api.main import app  # noqa: E402
from tests.helpers import OWNER  # noqa: E402


@pytest.fixture
async def client(session_factory, storage) -> AsyncClient:
    """Async client against the app, wired to the test database and content store."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers={"X-Owner-Id": OWNER}
    ) as client:
        yield client

    app.dependency_overrides.clear()
