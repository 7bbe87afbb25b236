from unittest.mock import patch

import pytest

from src.shared.exceptions import StorageError


async def test_readiness_reports_dependencies(client):
    response = await client.get("/health/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["dependencies"]["database"]["status"] == "up"
    assert body["dependencies"]["content_store"]["status"] == "up"


async def test_readiness_fails_when_store_is_down(client, storage):
    async def broken_exists(key):
        raise StorageError("unreachable", key=key)

    storage.exists = broken_exists

    response = await client.get("/v1/health/ready")
    assert response.status_code == 503
    assert response.json()["dependencies"]["content_store"]["error"] == "unreachable"

    response = await client.get("/v1/health/ready", params={"silent": "true"})
    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"


@pytest.mark.parametrize("path", ["/health", "/v1/health", "/health/ready", "/v1/health/ready"])
async def test_health_probes_are_not_request_logged(client, path):
    with patch("src.core.observability.middleware.logger") as request_logger:
        response = await client.get(path)

    assert response.status_code == 200
    request_logger.info.assert_not_called()


async def test_api_requests_are_request_logged(client):
    with patch("src.core.observability.middleware.logger") as request_logger:
        response = await client.get("/v1/folders")

    assert response.status_code == 200
    request_logger.info.assert_called_once()
    assert request_logger.info.call_args.kwargs["path"] == "/v1/folders"
