"""
User Document Model
===================

Database model for user documents. Folders have no table of their own:
a folder is the set of records sharing a ``category`` value, and an empty
folder is kept visible by a hidden placeholder record.
"""

from enum import Enum

from sqlalchemy import JSON, Boolean, Index, Integer, String, Text, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.identifiers import generate_document_id
from src.shared.kernel.models.base import Base, TimestampMixin

DEFAULT_CATEGORY = "General"

PLACEHOLDER_TITLE = "__FOLDER_PLACEHOLDER__"
PLACEHOLDER_DESCRIPTION = "Folder placeholder - do not display"
PLACEHOLDER_FILE_NAME = "__folder_placeholder__"
PLACEHOLDER_FILE_TYPE = "application/folder"


class DocumentStatus(str, Enum):
    """Review workflow state of a document."""

    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    ARCHIVED = "archived"


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Deduplicate tags keeping first-appearance order, dropping blanks."""
    seen: dict[str, None] = {}
    for tag in tags or []:
        cleaned = str(tag).strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


class UserDocument(Base, TimestampMixin):
    """
    A stored file owned by one user, or a folder placeholder.
    """

    __tablename__ = "user_documents"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_document_id)
    owner_id: Mapped[str] = mapped_column(String, index=True, nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    content_key: Mapped[str] = mapped_column(Text, default="", nullable=False)  # Key in the content store

    category: Mapped[str] = mapped_column(
        String(100), default=DEFAULT_CATEGORY, nullable=False, index=True
    )
    tags: Mapped[list] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), default=list, nullable=False
    )

    status: Mapped[DocumentStatus] = mapped_column(
        SQLEnum(
            DocumentStatus,
            name="document_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=DocumentStatus.DRAFT,
        nullable=False,
    )
    starred: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_folder_placeholder: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @classmethod
    def placeholder(cls, owner_id: str, category: str) -> "UserDocument":
        """Build the hidden record that keeps an empty folder visible."""
        return cls(
            id=generate_document_id(),
            owner_id=owner_id,
            title=PLACEHOLDER_TITLE,
            description=PLACEHOLDER_DESCRIPTION,
            file_name=PLACEHOLDER_FILE_NAME,
            file_type=PLACEHOLDER_FILE_TYPE,
            file_size=0,
            content_key="",
            category=category,
            tags=[],
            status=DocumentStatus.DRAFT,
            starred=False,
            is_folder_placeholder=True,
        )

    def __repr__(self):
        return f"<UserDocument(id={self.id}, category={self.category}, title={self.title})>"


# One placeholder per folder name per owner; a racing create of the same
# folder fails here with an IntegrityError.
Index(
    "uq_user_documents_folder_placeholder",
    UserDocument.owner_id,
    func.lower(UserDocument.category),
    unique=True,
    postgresql_where=UserDocument.is_folder_placeholder.is_(True),
    sqlite_where=UserDocument.is_folder_placeholder.is_(True),
)
