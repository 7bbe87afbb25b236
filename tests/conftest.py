"""
Shared test fixtures.

Tests run against a file-backed SQLite database (aiosqlite) so that
concurrent sessions see each other's commits, and against the in-memory
content store.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.database.session import build_engine
from src.core.database.unit_of_work import SessionUnitOfWork
from src.core.documents.domain.document import DocumentStatus, UserDocument
from src.core.documents.infrastructure.repositories.sql_document_repository import (
    SqlDocumentRepository,
)
from src.core.folders.application.folder_service import FolderService
from src.core.storage.infrastructure.memory_store import InMemoryContentStore
from src.shared.kernel.models.base import Base
from tests.helpers import OWNER


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'filedrawer.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """
    Yields an async database session for testing.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return InMemoryContentStore()


@pytest.fixture
def folder_service(db_session, storage):
    return FolderService(SqlDocumentRepository(db_session), SessionUnitOfWork(db_session), storage)


@pytest.fixture
def make_document(db_session, storage):
    """Insert a real document (and its stored bytes) directly, bypassing the services."""

    async def _make(
        category: str = "General",
        owner_id: str = OWNER,
        title: str = "report.pdf",
        size: int = 10,
        starred: bool = False,
    ) -> UserDocument:
        key = f"{owner_id}/seed-{title}-{category}"
        await storage.put(key, b"x" * size, "application/pdf")
        document = UserDocument(
            owner_id=owner_id,
            title=title,
            file_name=title,
            file_type="application/pdf",
            file_size=size,
            content_key=key,
            category=category,
            tags=[],
            status=DocumentStatus.DRAFT,
            starred=starred,
            is_folder_placeholder=False,
        )
        db_session.add(document)
        await db_session.commit()
        return document

    return _make
