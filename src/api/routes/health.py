"""
Health Check Endpoints
======================

Provides liveness and readiness probes for the API.
These endpoints do NOT require an owner identity.
"""

import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.config import settings
from src.api.deps import get_session_factory, get_storage
from src.core.storage.domain.ports.content_store import ContentStore

router = APIRouter(prefix="/health", tags=["health"])

STORAGE_PROBE_KEY = "__health__/probe"


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: str
    timestamp: str
    version: str


class DependencyStatus(BaseModel):
    """Individual dependency status."""

    status: str
    latency_ms: float | None = None
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness probe response with dependency status."""

    status: str
    timestamp: str
    dependencies: dict[str, DependencyStatus]


async def _probe(check: Callable[[], Awaitable[object]]) -> DependencyStatus:
    start = time.perf_counter()
    try:
        await check()
    except Exception as e:
        return DependencyStatus(status="down", error=str(e))
    return DependencyStatus(status="up", latency_ms=round((time.perf_counter() - start) * 1000, 2))


@router.get(
    "",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness Probe",
)
async def liveness() -> LivenessResponse:
    """Always returns 200 while the process is running."""
    return LivenessResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=settings.app_version,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "All dependencies healthy"},
        503: {"description": "One or more dependencies unhealthy"},
    },
    summary="Readiness Probe",
)
async def readiness(
    silent: bool = False,
    session_factory: Callable[[], AsyncSession] = Depends(get_session_factory),
    storage: ContentStore = Depends(get_storage),
):
    """
    Checks the database and the content store.

    Returns 503 when one of them is down, unless ``silent`` is set.
    """

    async def check_database() -> None:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))

    dependencies = {
        "database": await _probe(check_database),
        "content_store": await _probe(lambda: storage.exists(STORAGE_PROBE_KEY)),
    }
    is_healthy = all(dep.status == "up" for dep in dependencies.values())

    response = ReadinessResponse(
        status="ready" if is_healthy else "unhealthy",
        timestamp=datetime.now(UTC).isoformat(),
        dependencies=dependencies,
    )
    if not is_healthy and not silent:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )
    return response
