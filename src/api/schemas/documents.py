"""
Document Schemas
================

Request and response models for the document endpoints.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from src.core.documents.domain.document import DocumentStatus, UserDocument
from src.core.ingestion.domain.upload import BulkIngestResult, FileResult
from src.shared.identifiers import encode_folder_id


class DocumentResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    file_name: str
    file_type: str
    file_size: int
    category: str
    folder_id: str
    tags: list[str] = []
    status: DocumentStatus
    starred: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document: UserDocument) -> "DocumentResponse":
        return cls(
            id=document.id,
            title=document.title,
            description=document.description,
            file_name=document.file_name,
            file_type=document.file_type,
            file_size=document.file_size,
            category=document.category,
            folder_id=encode_folder_id(document.category),
            tags=list(document.tags or []),
            status=document.status,
            starred=document.starred,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DocumentUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    status: DocumentStatus | None = None
    starred: bool | None = None
    folder_id: str | None = None


class MoveDocumentRequest(BaseModel):
    folder_id: str = Field(..., description="Target folder id")


class UploadMetadata(BaseModel):
    """``metadata`` form field of a single upload."""

    title: str | None = None
    description: str | None = None
    tags: list[str] = []
    folder_id: str | None = None


class BulkUploadMetadata(BaseModel):
    """``metadata`` form field of a bulk upload, shared by every file."""

    description: str | None = None
    tags: list[str] = []
    folder_id: str | None = None
    category: str | None = None


class FileResultResponse(BaseModel):
    index: int
    file_name: str
    status: Literal["success", "error"]
    document: DocumentResponse | None = None
    error: str | None = None

    @classmethod
    def from_result(cls, result: FileResult) -> "FileResultResponse":
        return cls(
            index=result.index,
            file_name=result.file_name,
            status=result.status,
            document=DocumentResponse.from_document(result.document) if result.document else None,
            error=result.error,
        )


class BulkSummaryResponse(BaseModel):
    total: int
    successful: int
    failed: int
    success_rate: int


class BulkUploadResponse(BaseModel):
    message: str
    category: str
    results: list[FileResultResponse]
    summary: BulkSummaryResponse

    @classmethod
    def from_result(cls, result: BulkIngestResult) -> "BulkUploadResponse":
        summary = result.summary
        return cls(
            message=(
                f"Bulk upload completed: {summary.successful} successful, "
                f"{summary.failed} failed"
            ),
            category=result.category,
            results=[FileResultResponse.from_result(r) for r in result.results],
            summary=BulkSummaryResponse(
                total=summary.total,
                successful=summary.successful,
                failed=summary.failed,
                success_rate=summary.success_rate,
            ),
        )
