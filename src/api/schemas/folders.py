"""
Folder Schemas
==============

Request and response models for the folder endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.core.folders.domain.folder import Folder, FolderStats


class FolderCreate(BaseModel):
    name: str = Field(..., description="Folder name, 2-50 characters after trimming")


class FolderUpdate(BaseModel):
    name: str = Field(..., description="New folder name")


class FolderResponse(BaseModel):
    id: str
    name: str
    document_count: int
    is_default: bool
    created_at: datetime | None = None

    @classmethod
    def from_folder(cls, folder: Folder) -> "FolderResponse":
        return cls(
            id=folder.id,
            name=folder.name,
            document_count=folder.document_count,
            is_default=folder.is_default,
            created_at=folder.created_at,
        )


class FolderDeletedResponse(BaseModel):
    message: str
    folder_name: str
    deleted_documents: int


class CleanupResponse(BaseModel):
    message: str
    managed_folder_count: int
    reassigned_documents: int


class FolderStatsResponse(BaseModel):
    folder_id: str
    folder_name: str
    document_count: int
    total_size: int
    starred_count: int
    last_modified: datetime | None = None
    is_empty: bool

    @classmethod
    def from_stats(cls, folder_id: str, stats: FolderStats) -> "FolderStatsResponse":
        return cls(
            folder_id=folder_id,
            folder_name=stats.folder_name,
            document_count=stats.document_count,
            total_size=stats.total_size,
            starred_count=stats.starred_count,
            last_modified=stats.last_modified,
            is_empty=stats.is_empty,
        )
