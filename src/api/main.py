"""
Filedrawer API
==============

FastAPI application entry point.
Configures middleware, routes, and exception handlers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.config import settings
from src.api.middleware.exceptions import register_exception_handlers
from src.api.routes import documents, folders, health
from src.core.events.dispatcher import build_event_dispatcher
from src.core.observability.logging import configure_logging
from src.core.observability.middleware import RequestIDMiddleware, StructuredLoggingMiddleware

configure_logging(log_level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Debug mode: {settings.debug}")

    from src.core.database.session import close_database, configure_database

    configure_database(
        database_url=settings.db.database_url,
        pool_size=settings.db.pool_size,
        max_overflow=settings.db.max_overflow,
    )
    logger.info("Database module configured")

    app.state.event_dispatcher = build_event_dispatcher(settings.db.redis_url)
    logger.info(f"Storage backend: {settings.storage.backend}")

    yield

    logger.info("Shutting down...")

    async def safe_shutdown(coro, name):
        try:
            await coro
        except Exception as e:
            logger.warning(f"Error closing {name}: {e}")

    await safe_shutdown(app.state.event_dispatcher.close(), "event dispatcher")
    await safe_shutdown(close_database(), "database")


# =============================================================================
# Create FastAPI Application
# =============================================================================

app = FastAPI(
    title="Filedrawer API",
    description="""
    Document storage organised in folders, with bulk upload.

    ## Identity

    Every endpoint except the health checks acts on behalf of one owner,
    passed in the `X-Owner-Id` header by the upstream gateway.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "health", "description": "Liveness and readiness probes"},
        {"name": "folders", "description": "Virtual folder management"},
        {"name": "documents", "description": "Document upload, management, and download"},
    ],
    lifespan=lifespan,
)

# =============================================================================
# Register Middleware (order matters - last registered = outermost)
# =============================================================================

cors_origins = settings.cors_origins or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(StructuredLoggingMiddleware)

# Outermost, so the id is available to everything below
app.add_middleware(RequestIDMiddleware)

register_exception_handlers(app)

# =============================================================================
# Register Routes
# =============================================================================

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(health.router)
v1_router.include_router(folders.router, prefix="/folders", tags=["folders"])
v1_router.include_router(documents.router)

# Also expose health check at root /health for infrastructure probes
app.include_router(health.router)
app.include_router(v1_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
    }
