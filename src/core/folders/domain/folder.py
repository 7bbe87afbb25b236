"""
Folder Domain
=============

Folders are derived from the ``category`` column of user documents.
This module holds the value types returned by folder operations and the
folder naming rules.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from src.core.documents.domain.document import DEFAULT_CATEGORY
from src.shared.exceptions import ValidationError
from src.shared.identifiers import encode_folder_id

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50

INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*]')
RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)


def is_default_folder(name: str) -> bool:
    """Case-insensitive check used to protect the default folder."""
    return name.strip().lower() == DEFAULT_CATEGORY.lower()


def validate_folder_name(name: str | None) -> str:
    """
    Validate a folder name and return it trimmed.

    Raises:
        ValidationError: If the name breaks a naming rule.
    """
    if name is None or not isinstance(name, str):
        raise ValidationError("Folder name is required")

    trimmed = name.strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        raise ValidationError(
            f"Folder name must be at least {MIN_NAME_LENGTH} characters long"
        )
    if len(trimmed) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Folder name must be less than {MAX_NAME_LENGTH} characters"
        )
    if INVALID_NAME_CHARS.search(trimmed):
        raise ValidationError('Folder name contains invalid characters (< > : " / \\ | ? *)')
    if trimmed.upper() in RESERVED_NAMES:
        raise ValidationError(f"Folder name '{trimmed}' is reserved by the system")
    return trimmed


@dataclass
class Folder:
    name: str
    document_count: int = 0
    created_at: datetime | None = None

    @property
    def id(self) -> str:
        return encode_folder_id(self.name)

    @property
    def is_default(self) -> bool:
        return is_default_folder(self.name)


@dataclass
class FolderStats:
    folder_name: str
    document_count: int
    total_size: int
    starred_count: int
    last_modified: datetime | None

    @property
    def is_empty(self) -> bool:
        return self.document_count == 0


@dataclass
class ConfirmationRequired:
    """Delete was refused because the folder still holds documents."""

    folder_name: str
    document_count: int


@dataclass
class FolderDeleted:
    folder_name: str
    deleted_documents: int


@dataclass
class ReconcileResult:
    managed_folder_count: int
    reassigned_documents: int
