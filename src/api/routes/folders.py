"""
Folder API Routes
=================

Endpoints for managing virtual folders.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from src.api.deps import get_current_owner_id, get_folder_service
from src.api.schemas.errors import ConfirmationRequiredResponse
from src.api.schemas.folders import (
    CleanupResponse,
    FolderCreate,
    FolderDeletedResponse,
    FolderResponse,
    FolderStatsResponse,
    FolderUpdate,
)
from src.core.folders.application.folder_service import FolderService
from src.core.folders.domain.folder import ConfirmationRequired

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[FolderResponse])
async def list_folders(
    owner_id: str = Depends(get_current_owner_id),
    service: FolderService = Depends(get_folder_service),
):
    """List the owner's folders. The General folder is always present."""
    folders = await service.list_folders(owner_id)
    return [FolderResponse.from_folder(folder) for folder in folders]


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    folder_in: FolderCreate,
    owner_id: str = Depends(get_current_owner_id),
    service: FolderService = Depends(get_folder_service),
):
    folder = await service.create_folder(owner_id, folder_in.name)
    return FolderResponse.from_folder(folder)


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_folders(
    owner_id: str = Depends(get_current_owner_id),
    service: FolderService = Depends(get_folder_service),
):
    """Move documents whose category is not a managed folder back to General."""
    result = await service.reconcile_folders(owner_id)
    return CleanupResponse(
        message="Folder cleanup completed",
        managed_folder_count=result.managed_folder_count,
        reassigned_documents=result.reassigned_documents,
    )


@router.get("/{folder_id}/stats", response_model=FolderStatsResponse)
async def folder_stats(
    folder_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: FolderService = Depends(get_folder_service),
):
    stats = await service.folder_stats(owner_id, folder_id)
    return FolderStatsResponse.from_stats(folder_id, stats)


@router.put("/{folder_id}", response_model=FolderResponse)
async def rename_folder(
    folder_id: str,
    folder_in: FolderUpdate,
    owner_id: str = Depends(get_current_owner_id),
    service: FolderService = Depends(get_folder_service),
):
    """Rename a folder. Every document in it follows."""
    folder = await service.rename_folder(owner_id, folder_id, folder_in.name)
    return FolderResponse.from_folder(folder)


@router.delete(
    "/{folder_id}",
    response_model=FolderDeletedResponse,
    responses={status.HTTP_409_CONFLICT: {"model": ConfirmationRequiredResponse}},
)
async def delete_folder(
    folder_id: str,
    force: bool = Query(False, description="Delete the folder even if it holds documents"),
    owner_id: str = Depends(get_current_owner_id),
    service: FolderService = Depends(get_folder_service),
):
    """
    Delete a folder and all of its documents.

    A folder that still holds documents is only deleted with ``force=true``;
    without it the response is 409 with the number of documents at stake.
    """
    outcome = await service.delete_folder(owner_id, folder_id, force=force)

    if isinstance(outcome, ConfirmationRequired):
        body = ConfirmationRequiredResponse(
            message=(
                f"Folder '{outcome.folder_name}' contains {outcome.document_count} "
                f"documents. Confirm deletion to remove them."
            ),
            folder_name=outcome.folder_name,
            document_count=outcome.document_count,
        )
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump())

    return FolderDeletedResponse(
        message=f"Folder '{outcome.folder_name}' deleted",
        folder_name=outcome.folder_name,
        deleted_documents=outcome.deleted_documents,
    )
