"""
Upload Use Case
===============

Single-file upload with per-call title, description, tags and folder.
"""

import logging
from dataclasses import dataclass, field

from src.core.database.unit_of_work import UnitOfWork
from src.core.documents.domain.document import DocumentStatus, UserDocument, normalize_tags
from src.core.documents.domain.ports.document_repository import DocumentRepository
from src.core.events.dispatcher import DOCUMENT_CREATED, EventDispatcher
from src.core.folders.application.folder_service import FolderService
from src.core.ingestion.domain.upload import IncomingFile, build_storage_key, validate_incoming_file
from src.core.storage.domain.ports.content_store import ContentStore
from src.shared.exceptions import StorageError

logger = logging.getLogger(__name__)


@dataclass
class UploadDocumentRequest:
    """Request DTO for single-file upload."""

    owner_id: str
    file: IncomingFile
    title: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    folder_id: str | None = None


class UploadDocumentUseCase:
    """
    Use case for uploading one document.

    Handles:
    - Required field and size validation
    - Target folder resolution (General when none is given)
    - Upload with existence verification
    - Record creation
    """

    def __init__(
        self,
        document_repository: DocumentRepository,
        unit_of_work: UnitOfWork,
        storage: ContentStore,
        folder_service: FolderService,
        max_size_bytes: int,
        event_dispatcher: EventDispatcher | None = None,
    ):
        self._document_repository = document_repository
        self._unit_of_work = unit_of_work
        self._storage = storage
        self._folder_service = folder_service
        self._max_size_bytes = max_size_bytes
        self._event_dispatcher = event_dispatcher or EventDispatcher()

    async def execute(self, request: UploadDocumentRequest) -> UserDocument:
        """
        Raises:
            ValidationError: If the file is missing fields or too large.
            NotFoundError: If ``folder_id`` does not resolve.
            StorageError: If the upload or its verification fails.
        """
        file = request.file
        validate_incoming_file(file, self._max_size_bytes)

        if request.folder_id:
            category = await self._folder_service.resolve_category(
                request.owner_id, request.folder_id
            )
        else:
            category = await self._folder_service.ensure_default_folder(request.owner_id)

        key = build_storage_key(request.owner_id, file.name)
        await self._storage.put(key, file.data, file.content_type)
        if not await self._storage.exists(key):
            raise StorageError("Upload verification failed: file not found in storage", key=key)

        title = (request.title or "").strip() or file.name
        document = await self._document_repository.add(
            UserDocument(
                owner_id=request.owner_id,
                title=title,
                description=request.description,
                file_name=file.name,
                file_type=file.content_type,
                file_size=file.size,
                content_key=key,
                category=category,
                tags=normalize_tags(request.tags),
                status=DocumentStatus.DRAFT,
                starred=False,
                is_folder_placeholder=False,
            )
        )
        await self._unit_of_work.commit()

        logger.info(f"Uploaded document {document.id} to '{category}' for owner {request.owner_id}")
        await self._event_dispatcher.emit(
            DOCUMENT_CREATED, request.owner_id, document_id=document.id, category=category
        )
        return document
