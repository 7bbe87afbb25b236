"""
Document Service
================

Listing, editing, deleting and downloading user documents.
Placeholder records are invisible to every operation here.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from src.core.database.unit_of_work import UnitOfWork
from src.core.documents.domain.document import DocumentStatus, UserDocument, normalize_tags
from src.core.documents.domain.ports.document_repository import DocumentRepository
from src.core.events.dispatcher import DOCUMENT_DELETED, EventDispatcher
from src.core.folders.application.folder_service import FolderService
from src.core.storage.domain.ports.content_store import ContentStore
from src.shared.exceptions import NotFoundError, StorageError, ValidationError
from src.shared.kernel.models.base import utcnow

logger = logging.getLogger(__name__)


@dataclass
class DocumentChanges:
    """Partial update. ``None`` means leave the field untouched."""

    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    status: DocumentStatus | None = None
    starred: bool | None = None
    folder_id: str | None = None


@dataclass
class DocumentDownload:
    file_name: str
    content_type: str
    size: int
    stream: AsyncIterator[bytes]


class DocumentService:
    def __init__(
        self,
        repository: DocumentRepository,
        uow: UnitOfWork,
        storage: ContentStore,
        folder_service: FolderService,
        events: EventDispatcher | None = None,
    ):
        self.repository = repository
        self.uow = uow
        self.storage = storage
        self.folder_service = folder_service
        self.events = events or EventDispatcher()

    async def list_documents(
        self, owner_id: str, folder_id: str | None = None
    ) -> list[UserDocument]:
        category = None
        if folder_id:
            category = await self.folder_service.resolve_category(owner_id, folder_id)
        return await self.repository.list_documents(owner_id, category)

    async def get_document(self, owner_id: str, document_id: str) -> UserDocument:
        document = await self.repository.get(owner_id, document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        return document

    async def update_document(
        self, owner_id: str, document_id: str, changes: DocumentChanges
    ) -> UserDocument:
        document = await self.get_document(owner_id, document_id)
        if changes.folder_id is not None:
            # Fail on an unknown target before touching any field
            await self.folder_service.resolve_category(owner_id, changes.folder_id)

        if changes.title is not None:
            title = changes.title.strip()
            if not title:
                raise ValidationError("Title cannot be empty")
            document.title = title
        if changes.description is not None:
            document.description = changes.description
        if changes.tags is not None:
            document.tags = normalize_tags(changes.tags)
        if changes.status is not None:
            document.status = changes.status
        if changes.starred is not None:
            document.starred = changes.starred
        document.updated_at = utcnow()

        if changes.folder_id is not None:
            document = await self.folder_service.move_document(
                owner_id, document_id, changes.folder_id
            )

        await self.uow.commit()
        return document

    async def delete_document(self, owner_id: str, document_id: str) -> None:
        document = await self.get_document(owner_id, document_id)

        if document.content_key:
            try:
                await self.storage.delete(document.content_key)
            except StorageError as e:
                logger.warning(f"Failed to delete stored file for document {document_id}: {e}")

        await self.repository.delete(document)
        await self.uow.commit()
        await self.events.emit(DOCUMENT_DELETED, owner_id, document_id=document_id)

    async def open_download(self, owner_id: str, document_id: str) -> DocumentDownload:
        """
        Raises:
            NotFoundError: If the document or its stored file is missing.
            StorageError: If the content store cannot be reached.
        """
        document = await self.get_document(owner_id, document_id)
        if not document.content_key or not await self.storage.exists(document.content_key):
            raise NotFoundError("File", document_id)

        return DocumentDownload(
            file_name=document.file_name,
            content_type=document.file_type,
            size=document.file_size,
            stream=self.storage.get_stream(document.content_key),
        )
