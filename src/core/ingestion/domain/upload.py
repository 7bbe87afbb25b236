"""
Upload Domain
=============

Value types and rules shared by single and bulk uploads.
"""

import re
import time
from dataclasses import dataclass, field
from typing import Literal

from src.core.documents.domain.document import UserDocument
from src.shared.exceptions import ValidationError

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass
class IncomingFile:
    """
    A file received from a client.

    ``size`` is the size reported by the transport. Oversized files are
    rejected on it without reading ``data``.
    """

    name: str
    content_type: str
    size: int
    data: bytes = b""


@dataclass
class SharedMetadata:
    """Metadata applied to every file of a bulk upload."""

    description: str | None = None
    tags: list[str] = field(default_factory=list)
    folder_id: str | None = None
    category: str | None = None


@dataclass
class FileResult:
    index: int
    file_name: str
    status: Literal["success", "error"]
    document: UserDocument | None = None
    error: str | None = None

    @classmethod
    def success(cls, index: int, file_name: str, document: UserDocument) -> "FileResult":
        return cls(index=index, file_name=file_name, status="success", document=document)

    @classmethod
    def failure(cls, index: int, file_name: str, error: str) -> "FileResult":
        return cls(index=index, file_name=file_name, status="error", error=error)


@dataclass
class BulkSummary:
    total: int
    successful: int
    failed: int
    success_rate: int

    @classmethod
    def from_results(cls, results: list[FileResult]) -> "BulkSummary":
        total = len(results)
        successful = sum(1 for r in results if r.status == "success")
        rate = round(successful / total * 100) if total else 0
        return cls(total=total, successful=successful, failed=total - successful, success_rate=rate)


@dataclass
class BulkIngestResult:
    category: str
    results: list[FileResult]
    summary: BulkSummary


def sanitize_file_name(name: str) -> str:
    return _UNSAFE_KEY_CHARS.sub("_", name)


def build_storage_key(
    owner_id: str, file_name: str, index: int | None = None, timestamp_ms: int | None = None
) -> str:
    """
    Derive the content store key for an upload.

    Format is ``{owner}/{timestamp_ms}-{index}-{name}`` for bulk uploads and
    ``{owner}/{timestamp_ms}-{name}`` for single uploads.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    safe_name = sanitize_file_name(file_name)
    if index is None:
        return f"{owner_id}/{timestamp_ms}-{safe_name}"
    return f"{owner_id}/{timestamp_ms}-{index}-{safe_name}"


def validate_incoming_file(file: IncomingFile, max_size_bytes: int) -> None:
    """
    Raises:
        ValidationError: If required fields are missing or the size is out of range.
    """
    if not file.name or not file.name.strip():
        raise ValidationError("File name is required")
    if not file.content_type:
        raise ValidationError(f"File type is required for {file.name}")
    if file.size <= 0:
        raise ValidationError(f"File {file.name} is empty")
    if file.size > max_size_bytes:
        limit_mb = max_size_bytes / (1024 * 1024)
        raise ValidationError(
            f"File {file.name} exceeds the maximum size of {limit_mb:g} MB",
            details={"size": file.size, "max_size": max_size_bytes},
        )
