"""
Bulk Ingestion Pipeline
=======================

Uploads many files into one folder.

Files are processed in fixed-size batches. Every file of a batch is
attempted concurrently and the next batch starts once all of them have
settled. Each attempt runs in its own database session, so a failing file
never affects its siblings: failures are reported per file in the result.
"""

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.unit_of_work import SqlAlchemyUnitOfWork
from src.core.documents.domain.document import DocumentStatus, UserDocument, normalize_tags
from src.core.documents.domain.ports.document_repository import DocumentRepository
from src.core.documents.infrastructure.repositories.sql_document_repository import (
    SqlDocumentRepository,
)
from src.core.events.dispatcher import BULK_UPLOAD_COMPLETED, DOCUMENT_UPLOADED, EventDispatcher
from src.core.folders.application.folder_service import FolderService
from src.core.ingestion.domain.upload import (
    BulkIngestResult,
    BulkSummary,
    FileResult,
    IncomingFile,
    SharedMetadata,
    build_storage_key,
    validate_incoming_file,
)
from src.core.storage.domain.ports.content_store import ContentStore
from src.core.utils.batching import indexed_batches
from src.shared.exceptions import AppException, StorageError, ValidationError

logger = logging.getLogger(__name__)


class BulkIngestionPipeline:
    DEFAULT_BATCH_SIZE = 5

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        storage: ContentStore,
        max_size_bytes: int,
        batch_size: int = DEFAULT_BATCH_SIZE,
        event_dispatcher: EventDispatcher | None = None,
        repository_factory: Callable[[AsyncSession], DocumentRepository] = SqlDocumentRepository,
    ):
        """
        Args:
            session_factory: Creates a fresh session per file attempt.
            storage: Content store receiving the file bytes.
            max_size_bytes: Per-file size limit.
            batch_size: Number of files attempted concurrently.
        """
        self._session_factory = session_factory
        self._storage = storage
        self._max_size_bytes = max_size_bytes
        self._batch_size = batch_size
        self._events = event_dispatcher or EventDispatcher()
        self._repository_factory = repository_factory

    async def ingest(
        self, owner_id: str, files: list[IncomingFile], metadata: SharedMetadata | None = None
    ) -> BulkIngestResult:
        """
        Ingest files into the target folder of ``metadata``.

        Raises:
            ValidationError: If no files are given.
            NotFoundError: If the target folder does not exist.
        """
        if not files:
            raise ValidationError("No files provided")
        metadata = metadata or SharedMetadata()

        category = await self._resolve_target(owner_id, metadata)

        batches = indexed_batches(files, self._batch_size)
        logger.info(
            f"Bulk upload of {len(files)} files into '{category}' for owner {owner_id} "
            f"({len(batches)} batches)"
        )

        results: list[FileResult] = []
        for number, batch in enumerate(batches, start=1):
            batch_results = await asyncio.gather(
                *(self._attempt(owner_id, index, file, category, metadata) for index, file in batch)
            )
            results.extend(batch_results)
            logger.debug(f"Batch {number}/{len(batches)} settled")

        results.sort(key=lambda r: r.index)
        summary = BulkSummary.from_results(results)
        logger.info(
            f"Bulk upload finished for owner {owner_id}: "
            f"{summary.successful}/{summary.total} succeeded"
        )

        await self._events.emit(
            BULK_UPLOAD_COMPLETED,
            owner_id,
            category=category,
            total=summary.total,
            successful=summary.successful,
            failed=summary.failed,
        )
        return BulkIngestResult(category=category, results=results, summary=summary)

    async def _resolve_target(self, owner_id: str, metadata: SharedMetadata) -> str:
        async with SqlAlchemyUnitOfWork(self._session_factory) as uow:
            folders = FolderService(
                self._repository_factory(uow.session), uow, self._storage, self._events
            )
            if metadata.folder_id:
                return await folders.resolve_category(owner_id, metadata.folder_id)
            if metadata.category:
                return await folders.resolve_folder_name(owner_id, metadata.category)
            return await folders.ensure_default_folder(owner_id)

    async def _attempt(
        self,
        owner_id: str,
        index: int,
        file: IncomingFile,
        category: str,
        metadata: SharedMetadata,
    ) -> FileResult:
        file_name = file.name or f"file-{index}"
        try:
            document = await self._ingest_one(owner_id, index, file, category, metadata)
        except AppException as e:
            logger.warning(f"Bulk upload: file {index} ({file_name}) failed: {e.message}")
            return FileResult.failure(index, file_name, e.message)
        except Exception as e:
            logger.exception(f"Bulk upload: unexpected error for file {index} ({file_name})")
            return FileResult.failure(index, file_name, str(e) or type(e).__name__)

        await self._events.emit(
            DOCUMENT_UPLOADED, owner_id, document_id=document.id, category=category
        )
        return FileResult.success(index, file_name, document)

    async def _ingest_one(
        self,
        owner_id: str,
        index: int,
        file: IncomingFile,
        category: str,
        metadata: SharedMetadata,
    ) -> UserDocument:
        validate_incoming_file(file, self._max_size_bytes)

        key = build_storage_key(owner_id, file.name, index=index)
        await self._storage.put(key, file.data, file.content_type)

        if not await self._storage.exists(key):
            raise StorageError("Upload verification failed: file not found in storage", key=key)

        # The blob stays in place if the insert fails
        async with SqlAlchemyUnitOfWork(self._session_factory) as uow:
            repository = self._repository_factory(uow.session)
            document = await repository.add(
                UserDocument(
                    owner_id=owner_id,
                    title=file.name,
                    description=metadata.description,
                    file_name=file.name,
                    file_type=file.content_type,
                    file_size=file.size,
                    content_key=key,
                    category=category,
                    tags=normalize_tags(metadata.tags),
                    status=DocumentStatus.DRAFT,
                    starred=False,
                    is_folder_placeholder=False,
                )
            )
        return document
