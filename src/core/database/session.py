"""
Database Session Management
===========================

Provides async database session utilities with lazy initialization.
The engine and session maker are created on first access, not at import time,
so unit tests can import modules without a database connection.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Lazy-initialized globals
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None

# Database configuration holder
_db_config: dict = {}


def configure_database(database_url: str, pool_size: int = 5, max_overflow: int = 10) -> None:
    """Configure database connection parameters. Called by API layer on startup."""
    global _db_config
    _db_config = {
        "database_url": database_url,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
    }


def build_engine(database_url: str, pool_size: int = 5, max_overflow: int = 10) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite (aiosqlite) uses its own pool class, so pool sizing is only passed
    to server databases.
    """
    kwargs: dict = {"echo": False, "pool_pre_ping": True}
    if make_url(database_url).get_backend_name() != "sqlite":
        kwargs["pool_size"] = pool_size
        kwargs["max_overflow"] = max_overflow
    return create_async_engine(database_url, **kwargs)


def get_engine() -> AsyncEngine:
    """
    Get the async database engine, creating it on first access.

    Returns:
        AsyncEngine: The SQLAlchemy async engine.
    """
    global _engine
    if _engine is None:
        if not _db_config:
            raise RuntimeError("Database not configured. Call configure_database() first.")
        _engine = build_engine(
            _db_config["database_url"],
            pool_size=_db_config.get("pool_size", 5),
            max_overflow=_db_config.get("max_overflow", 10),
        )
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Get the async session maker, creating it on first access.

    Returns:
        async_sessionmaker: Factory for creating database sessions.
    """
    global _async_session_maker
    if _async_session_maker is None:
        _async_session_maker = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_maker


async def close_database() -> None:
    """
    Dispose the engine and reset globals.
    Should be called on application shutdown.
    """
    global _engine, _async_session_maker
    try:
        if _engine:
            await _engine.dispose()
    finally:
        _engine = None
        _async_session_maker = None
