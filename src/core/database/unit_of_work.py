"""
Unit of Work
============

Transaction boundaries over SQLAlchemy sessions.

``SessionUnitOfWork`` wraps a session owned by someone else (the request
scoped session of an API call). ``SqlAlchemyUnitOfWork`` opens and closes its
own session, which lets concurrent tasks work in independent transactions.
"""

from collections.abc import Callable
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


class UnitOfWork(Protocol):
    """Protocol defining the Unit of Work interface."""

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...


class SessionUnitOfWork:
    """Unit of Work bound to an existing session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


class SqlAlchemyUnitOfWork:
    """
    Unit of Work that owns its session.

    Usage:
        async with SqlAlchemyUnitOfWork(session_maker) as uow:
            repo = SqlDocumentRepository(uow.session)
            ...
    Commits on a clean exit and rolls back when the block raises.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        """Exit the context manager, committing or rolling back."""
        if not self.session:
            return

        try:
            if exc:
                await self.rollback()
            else:
                await self.commit()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self.session:
            await self.session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self.session:
            await self.session.rollback()
