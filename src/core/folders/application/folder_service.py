"""
Folder Service
==============

Virtual folders over the flat user document table.

A folder exists while at least one record carries its name as ``category``.
Empty folders are witnessed by a hidden placeholder record, and the default
"General" folder is recreated on demand so every owner always has one.
"""

import logging

from sqlalchemy.exc import IntegrityError

from src.core.database.unit_of_work import UnitOfWork
from src.core.documents.domain.document import DEFAULT_CATEGORY, UserDocument
from src.core.documents.domain.ports.document_repository import DocumentRepository
from src.core.events.dispatcher import (
    FOLDER_CREATED,
    FOLDER_DELETED,
    FOLDER_RENAMED,
    EventDispatcher,
)
from src.core.folders.domain.folder import (
    ConfirmationRequired,
    Folder,
    FolderDeleted,
    FolderStats,
    ReconcileResult,
    is_default_folder,
    validate_folder_name,
)
from src.core.storage.domain.ports.content_store import ContentStore
from src.shared.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from src.shared.identifiers import decode_folder_id
from src.shared.kernel.models.base import utcnow

logger = logging.getLogger(__name__)


class FolderService:
    def __init__(
        self,
        repository: DocumentRepository,
        uow: UnitOfWork,
        storage: ContentStore,
        events: EventDispatcher | None = None,
    ):
        self.repository = repository
        self.uow = uow
        self.storage = storage
        self.events = events or EventDispatcher()

    async def list_folders(self, owner_id: str) -> list[Folder]:
        """List the owner's folders ordered by name, creating General if missing."""
        rows = await self.repository.list_categories(owner_id)
        if not any(is_default_folder(row.category) for row in rows):
            await self.ensure_default_folder(owner_id)
            rows = await self.repository.list_categories(owner_id)

        return [Folder(row.category, row.document_count, row.created_at) for row in rows]

    async def ensure_default_folder(self, owner_id: str) -> str:
        """Make sure the General folder is witnessed and return its stored name."""
        existing = await self.repository.find_category(owner_id, DEFAULT_CATEGORY)
        if existing is not None:
            return existing

        try:
            await self.repository.add(UserDocument.placeholder(owner_id, DEFAULT_CATEGORY))
            await self.uow.commit()
            logger.info(f"Created default folder for owner {owner_id}")
        except IntegrityError:
            # A concurrent request created it first
            await self.uow.rollback()
        return DEFAULT_CATEGORY

    async def create_folder(self, owner_id: str, name: str) -> Folder:
        folder_name = validate_folder_name(name)

        # General exists for every owner, witnessed or not
        if is_default_folder(folder_name):
            raise ConflictError(
                f"A folder named '{DEFAULT_CATEGORY}' already exists",
                details={"folder_name": DEFAULT_CATEGORY},
            )

        existing = await self.repository.find_category(owner_id, folder_name)
        if existing is not None:
            raise ConflictError(
                f"A folder named '{existing}' already exists",
                details={"folder_name": existing},
            )

        placeholder = UserDocument.placeholder(owner_id, folder_name)
        try:
            await self.repository.add(placeholder)
            await self.uow.commit()
        except IntegrityError as e:
            await self.uow.rollback()
            raise ConflictError(
                f"A folder named '{folder_name}' already exists",
                details={"folder_name": folder_name},
            ) from e

        logger.info(f"Created folder '{folder_name}' for owner {owner_id}")
        await self.events.emit(FOLDER_CREATED, owner_id, folder_name=folder_name)
        return Folder(folder_name, 0, placeholder.created_at)

    async def resolve_category(self, owner_id: str, folder_id: str) -> str:
        """
        Resolve a folder id to the category as stored.

        Raises:
            NotFoundError: If the id is malformed or names no folder of the owner.
        """
        try:
            name = decode_folder_id(folder_id)
        except ValueError as e:
            raise NotFoundError("Folder", folder_id) from e

        return await self.resolve_folder_name(owner_id, name, identifier=folder_id)

    async def resolve_folder_name(
        self, owner_id: str, name: str, identifier: str | None = None
    ) -> str:
        """Resolve a folder name case-insensitively to its stored casing."""
        if is_default_folder(name):
            return await self.ensure_default_folder(owner_id)

        category = await self.repository.find_category(owner_id, name.strip())
        if category is None:
            raise NotFoundError("Folder", identifier or name)
        return category

    async def rename_folder(self, owner_id: str, folder_id: str, new_name: str) -> Folder:
        current = await self.resolve_category(owner_id, folder_id)
        if is_default_folder(current):
            raise ForbiddenError("Cannot rename the default folder")

        folder_name = validate_folder_name(new_name)
        if folder_name == current:
            raise ValidationError("New folder name is the same as the current name")

        # Changing only the case of the same folder is allowed
        if folder_name.lower() != current.lower():
            existing = await self.repository.find_category(owner_id, folder_name)
            if existing is not None or is_default_folder(folder_name):
                raise ConflictError(
                    f"A folder named '{existing or folder_name}' already exists",
                    details={"folder_name": existing or folder_name},
                )

        try:
            updated = await self.repository.rename_category(owner_id, current, folder_name)
            await self.uow.commit()
        except IntegrityError as e:
            await self.uow.rollback()
            raise ConflictError(
                f"A folder named '{folder_name}' already exists",
                details={"folder_name": folder_name},
            ) from e

        logger.info(
            f"Renamed folder '{current}' to '{folder_name}' for owner {owner_id} "
            f"({updated} records)"
        )
        await self.events.emit(
            FOLDER_RENAMED, owner_id, old_name=current, new_name=folder_name
        )
        return await self._load_folder(owner_id, folder_name)

    async def delete_folder(
        self, owner_id: str, folder_id: str, force: bool = False
    ) -> FolderDeleted | ConfirmationRequired:
        """
        Delete a folder and every record in it.

        A folder that still holds documents is only deleted with ``force``;
        otherwise a ``ConfirmationRequired`` result is returned and nothing
        changes. Stored files are removed best-effort.
        """
        current = await self.resolve_category(owner_id, folder_id)
        if is_default_folder(current):
            raise ForbiddenError("Cannot delete the default folder")

        document_count = await self.repository.count_documents(owner_id, current)
        if document_count > 0 and not force:
            return ConfirmationRequired(folder_name=current, document_count=document_count)

        documents = await self.repository.list_category_documents(owner_id, current)
        for document in documents:
            await self._discard_content(document)

        await self.repository.delete_category(owner_id, current)
        await self.uow.commit()

        logger.info(
            f"Deleted folder '{current}' for owner {owner_id} ({len(documents)} documents)"
        )
        await self.events.emit(
            FOLDER_DELETED, owner_id, folder_name=current, deleted_documents=len(documents)
        )
        return FolderDeleted(folder_name=current, deleted_documents=len(documents))

    async def move_document(
        self, owner_id: str, document_id: str, target_folder_id: str
    ) -> UserDocument:
        """Move a document to another folder. Only its category changes."""
        document = await self.repository.get(owner_id, document_id)
        if document is None:
            raise NotFoundError("Document", document_id)

        target = await self.resolve_category(owner_id, target_folder_id)
        if document.category.lower() == target.lower():
            return document

        previous = document.category
        document.category = target
        document.updated_at = utcnow()
        await self.uow.commit()

        logger.info(f"Moved document {document_id} from '{previous}' to '{target}'")
        return document

    async def reconcile_folders(self, owner_id: str) -> ReconcileResult:
        """
        Reassign documents in unmanaged categories to General.

        Managed folders are those with a placeholder record. When the owner
        has none, nothing is reassigned.
        """
        managed = await self.repository.managed_categories(owner_id)
        managed_count = len({name.lower() for name in managed})

        reassigned = 0
        if managed:
            reassigned = await self.repository.reassign_unmanaged(
                owner_id, managed, DEFAULT_CATEGORY
            )
            await self.uow.commit()

        if reassigned:
            logger.info(f"Reassigned {reassigned} documents to '{DEFAULT_CATEGORY}' for owner {owner_id}")
        return ReconcileResult(managed_folder_count=managed_count, reassigned_documents=reassigned)

    async def folder_stats(self, owner_id: str, folder_id: str) -> FolderStats:
        current = await self.resolve_category(owner_id, folder_id)
        stats = await self.repository.category_stats(owner_id, current)
        return FolderStats(
            folder_name=current,
            document_count=stats.document_count,
            total_size=stats.total_size,
            starred_count=stats.starred_count,
            last_modified=stats.last_modified,
        )

    async def _load_folder(self, owner_id: str, name: str) -> Folder:
        for row in await self.repository.list_categories(owner_id):
            if row.category.lower() == name.lower():
                return Folder(name, row.document_count, row.created_at)
        raise NotFoundError("Folder", name)

    async def _discard_content(self, document: UserDocument) -> None:
        if not document.content_key:
            return
        try:
            await self.storage.delete(document.content_key)
        except StorageError as e:
            logger.warning(
                f"Failed to delete stored file {document.content_key} "
                f"for document {document.id}: {e}"
            )
