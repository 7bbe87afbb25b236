from datetime import datetime
from typing import NamedTuple, Protocol

from src.core.documents.domain.document import UserDocument


class CategoryRow(NamedTuple):
    """Aggregated view of one category for an owner."""

    category: str
    document_count: int
    created_at: datetime | None


class CategoryStats(NamedTuple):
    document_count: int
    total_size: int
    starred_count: int
    last_modified: datetime | None


class DocumentRepository(Protocol):
    """
    Port for user document persistence.
    Every method is scoped to a single owner.
    """

    async def get(self, owner_id: str, document_id: str) -> UserDocument | None:
        """Retrieve a real (non-placeholder) document by ID."""
        ...

    async def add(self, document: UserDocument) -> UserDocument:
        """Stage a new record and flush it."""
        ...

    async def delete(self, document: UserDocument) -> None:
        """Delete a single record."""
        ...

    async def list_documents(
        self, owner_id: str, category: str | None = None
    ) -> list[UserDocument]:
        """List real documents, newest first, optionally within one category."""
        ...

    async def list_categories(self, owner_id: str) -> list[CategoryRow]:
        """One row per category (placeholders included) with real-document counts."""
        ...

    async def find_category(self, owner_id: str, name: str) -> str | None:
        """Return the stored casing of a category matching ``name`` case-insensitively."""
        ...

    async def count_documents(self, owner_id: str, category: str) -> int:
        """Count real documents in a category."""
        ...

    async def list_category_documents(self, owner_id: str, category: str) -> list[UserDocument]:
        """Real documents in a category (used for blob cleanup)."""
        ...

    async def rename_category(self, owner_id: str, old: str, new: str) -> int:
        """Rewrite the category of every record in ``old``. Returns rows updated."""
        ...

    async def delete_category(self, owner_id: str, category: str) -> int:
        """Delete every record in a category. Returns rows deleted."""
        ...

    async def managed_categories(self, owner_id: str) -> list[str]:
        """Distinct categories that carry a placeholder record."""
        ...

    async def reassign_unmanaged(self, owner_id: str, managed: list[str], target: str) -> int:
        """Move real documents outside ``managed`` to ``target``. Returns rows updated."""
        ...

    async def category_stats(self, owner_id: str, category: str) -> CategoryStats:
        """Size and star totals for the real documents of a category."""
        ...
