"""
API Dependencies
================

FastAPI dependency injection utilities.
"""

from collections.abc import AsyncGenerator, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.config import settings
from src.core.database.unit_of_work import SessionUnitOfWork
from src.core.documents.application.document_service import DocumentService
from src.core.documents.infrastructure.repositories.sql_document_repository import (
    SqlDocumentRepository,
)
from src.core.events.dispatcher import EventDispatcher
from src.core.folders.application.folder_service import FolderService
from src.core.ingestion.application.bulk_ingestion import BulkIngestionPipeline
from src.core.ingestion.application.use_cases_upload import UploadDocumentUseCase
from src.core.storage.domain.ports.content_store import ContentStore
from src.core.storage.infrastructure.factory import get_content_store
from src.shared.context import set_current_owner
from src.shared.exceptions import UnauthorizedError

OWNER_HEADER = "X-Owner-Id"


def get_session_factory() -> Callable[[], AsyncSession]:
    """Session maker used by work that needs its own transactions."""
    from src.core.database.session import get_session_maker

    return get_session_maker()


async def get_db_session(
    session_factory: Callable[[], AsyncSession] = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that yields a request scoped database session.

    Commits when the handler returns, rolls back on error.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_current_owner_id(request: Request) -> str:
    """
    Owner of the request.

    Set on ``request.state.owner_id`` by an upstream auth layer, or passed
    in the ``X-Owner-Id`` header.
    """
    owner_id = getattr(request.state, "owner_id", None) or request.headers.get(OWNER_HEADER)
    if not owner_id or not str(owner_id).strip():
        raise UnauthorizedError("Missing owner identity")

    owner_id = str(owner_id).strip()
    set_current_owner(owner_id)
    return owner_id


def get_storage() -> ContentStore:
    return get_content_store()


def get_event_dispatcher(request: Request) -> EventDispatcher:
    dispatcher = getattr(request.app.state, "event_dispatcher", None)
    return dispatcher or EventDispatcher()


def get_folder_service(
    session: AsyncSession = Depends(get_db_session),
    storage: ContentStore = Depends(get_storage),
    events: EventDispatcher = Depends(get_event_dispatcher),
) -> FolderService:
    return FolderService(SqlDocumentRepository(session), SessionUnitOfWork(session), storage, events)


def get_document_service(
    session: AsyncSession = Depends(get_db_session),
    storage: ContentStore = Depends(get_storage),
    events: EventDispatcher = Depends(get_event_dispatcher),
    folder_service: FolderService = Depends(get_folder_service),
) -> DocumentService:
    return DocumentService(
        SqlDocumentRepository(session), SessionUnitOfWork(session), storage, folder_service, events
    )


def get_upload_use_case(
    session: AsyncSession = Depends(get_db_session),
    storage: ContentStore = Depends(get_storage),
    events: EventDispatcher = Depends(get_event_dispatcher),
    folder_service: FolderService = Depends(get_folder_service),
) -> UploadDocumentUseCase:
    return UploadDocumentUseCase(
        document_repository=SqlDocumentRepository(session),
        unit_of_work=SessionUnitOfWork(session),
        storage=storage,
        folder_service=folder_service,
        max_size_bytes=settings.uploads.max_size_bytes,
        event_dispatcher=events,
    )


def get_bulk_pipeline(
    session_factory: Callable[[], AsyncSession] = Depends(get_session_factory),
    storage: ContentStore = Depends(get_storage),
    events: EventDispatcher = Depends(get_event_dispatcher),
) -> BulkIngestionPipeline:
    return BulkIngestionPipeline(
        session_factory=session_factory,
        storage=storage,
        max_size_bytes=settings.uploads.max_size_bytes,
        batch_size=settings.uploads.batch_size,
        event_dispatcher=events,
    )
