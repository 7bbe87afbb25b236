from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.documents.domain.document import UserDocument
from src.core.documents.domain.ports.document_repository import (
    CategoryRow,
    CategoryStats,
    DocumentRepository,
)
from src.shared.kernel.models.base import utcnow


class SqlDocumentRepository(DocumentRepository):
    """
    SQLAlchemy implementation of DocumentRepository.

    Bulk statements use ``synchronize_session="fetch"`` so objects already
    loaded in the session see the new category after a rename or reassign.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _owned(self, owner_id: str):
        return UserDocument.owner_id == owner_id

    async def get(self, owner_id: str, document_id: str) -> UserDocument | None:
        result = await self._session.execute(
            select(UserDocument).where(
                self._owned(owner_id),
                UserDocument.id == document_id,
                UserDocument.is_folder_placeholder.is_(False),
            )
        )
        return result.scalars().first()

    async def add(self, document: UserDocument) -> UserDocument:
        self._session.add(document)
        await self._session.flush()
        return document

    async def delete(self, document: UserDocument) -> None:
        await self._session.delete(document)
        await self._session.flush()

    async def list_documents(
        self, owner_id: str, category: str | None = None
    ) -> list[UserDocument]:
        query = select(UserDocument).where(
            self._owned(owner_id), UserDocument.is_folder_placeholder.is_(False)
        )
        if category is not None:
            query = query.where(func.lower(UserDocument.category) == category.lower())
        query = query.order_by(UserDocument.updated_at.desc(), UserDocument.id)

        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def list_categories(self, owner_id: str) -> list[CategoryRow]:
        real_count = func.sum(case((UserDocument.is_folder_placeholder.is_(False), 1), else_=0))
        folded = func.lower(UserDocument.category)
        result = await self._session.execute(
            select(
                func.min(UserDocument.category).label("category"),
                real_count.label("document_count"),
                func.min(UserDocument.created_at).label("created_at"),
            )
            .where(self._owned(owner_id))
            .group_by(folded)
            .order_by(folded)
        )
        groups = result.all()

        # Display the casing find_category resolves to, so listed names are the written names
        casing = await self._session.execute(
            select(
                UserDocument.category,
                func.max(case((UserDocument.is_folder_placeholder.is_(True), 1), else_=0)).label(
                    "has_placeholder"
                ),
                func.min(UserDocument.created_at).label("created_at"),
            )
            .where(self._owned(owner_id))
            .group_by(UserDocument.category)
        )
        canonical: dict[str, tuple] = {}
        for row in casing.all():
            rank = (-int(row.has_placeholder or 0), row.created_at)
            key = row.category.lower()
            if key not in canonical or rank < canonical[key][0]:
                canonical[key] = (rank, row.category)

        return [
            CategoryRow(
                canonical.get(row.category.lower(), (None, row.category))[1],
                int(row.document_count or 0),
                row.created_at,
            )
            for row in groups
        ]

    async def find_category(self, owner_id: str, name: str) -> str | None:
        # Prefer the placeholder's casing, it records the name the folder was created with
        result = await self._session.execute(
            select(UserDocument.category)
            .where(
                self._owned(owner_id),
                func.lower(UserDocument.category) == name.lower(),
            )
            .order_by(UserDocument.is_folder_placeholder.desc(), UserDocument.created_at)
            .limit(1)
        )
        return result.scalars().first()

    async def count_documents(self, owner_id: str, category: str) -> int:
        result = await self._session.execute(
            select(func.count(UserDocument.id)).where(
                self._owned(owner_id),
                func.lower(UserDocument.category) == category.lower(),
                UserDocument.is_folder_placeholder.is_(False),
            )
        )
        return int(result.scalar_one())

    async def list_category_documents(self, owner_id: str, category: str) -> list[UserDocument]:
        return await self.list_documents(owner_id, category)

    async def rename_category(self, owner_id: str, old: str, new: str) -> int:
        result = await self._session.execute(
            update(UserDocument)
            .where(
                self._owned(owner_id),
                func.lower(UserDocument.category) == old.lower(),
            )
            .values(category=new, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def delete_category(self, owner_id: str, category: str) -> int:
        result = await self._session.execute(
            delete(UserDocument)
            .where(
                self._owned(owner_id),
                func.lower(UserDocument.category) == category.lower(),
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def managed_categories(self, owner_id: str) -> list[str]:
        result = await self._session.execute(
            select(UserDocument.category)
            .where(self._owned(owner_id), UserDocument.is_folder_placeholder.is_(True))
            .distinct()
        )
        return list(result.scalars().all())

    async def reassign_unmanaged(self, owner_id: str, managed: list[str], target: str) -> int:
        keep = sorted({name.lower() for name in managed} | {target.lower()})
        result = await self._session.execute(
            update(UserDocument)
            .where(
                self._owned(owner_id),
                UserDocument.is_folder_placeholder.is_(False),
                func.lower(UserDocument.category).not_in(keep),
            )
            .values(category=target, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def category_stats(self, owner_id: str, category: str) -> CategoryStats:
        result = await self._session.execute(
            select(
                func.count(UserDocument.id),
                func.coalesce(func.sum(UserDocument.file_size), 0),
                func.sum(case((UserDocument.starred.is_(True), 1), else_=0)),
                func.max(UserDocument.updated_at),
            ).where(
                self._owned(owner_id),
                func.lower(UserDocument.category) == category.lower(),
                UserDocument.is_folder_placeholder.is_(False),
            )
        )
        count, total_size, starred, last_modified = result.one()
        return CategoryStats(
            document_count=int(count or 0),
            total_size=int(total_size or 0),
            starred_count=int(starred or 0),
            last_modified=last_modified,
        )
