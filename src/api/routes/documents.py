"""
Document API Routes
===================

Endpoints for uploading, listing, editing and downloading documents.
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.api.config import settings
from src.api.deps import (
    get_bulk_pipeline,
    get_current_owner_id,
    get_document_service,
    get_folder_service,
    get_upload_use_case,
)
from src.api.schemas.documents import (
    BulkUploadMetadata,
    BulkUploadResponse,
    DocumentResponse,
    DocumentUpdate,
    MoveDocumentRequest,
    UploadMetadata,
)
from src.core.documents.application.document_service import DocumentChanges, DocumentService
from src.core.folders.application.folder_service import FolderService
from src.core.ingestion.application.bulk_ingestion import BulkIngestionPipeline
from src.core.ingestion.application.use_cases_upload import (
    UploadDocumentRequest,
    UploadDocumentUseCase,
)
from src.core.ingestion.domain.upload import IncomingFile, SharedMetadata

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def _parse_metadata(raw: str | None, model: type[BaseModel]) -> BaseModel:
    """Parse the JSON ``metadata`` form field, reporting problems as a 422."""
    if raw is None or not raw.strip():
        return model()
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as e:
        errors = [{**error, "loc": ("body", "metadata", *error["loc"])} for error in e.errors()]
        raise RequestValidationError(errors) from e


async def _to_incoming(upload: UploadFile) -> IncomingFile:
    """Read an uploaded file, skipping the body when it is already too large."""
    size = upload.size
    data = b""
    if size is None or size <= settings.uploads.max_size_bytes:
        data = await upload.read()
        size = len(data)

    return IncomingFile(
        name=upload.filename or "",
        content_type=upload.content_type or "",
        size=size,
        data=data,
    )


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=DocumentResponse,
    summary="Upload Document",
)
async def upload_document(
    file: UploadFile = File(..., description="File to upload"),
    metadata: str | None = Form(None, description="JSON: title, description, tags, folder_id"),
    owner_id: str = Depends(get_current_owner_id),
    use_case: UploadDocumentUseCase = Depends(get_upload_use_case),
):
    meta = _parse_metadata(metadata, UploadMetadata)
    document = await use_case.execute(
        UploadDocumentRequest(
            owner_id=owner_id,
            file=await _to_incoming(file),
            title=meta.title,
            description=meta.description,
            tags=meta.tags,
            folder_id=meta.folder_id,
        )
    )
    return DocumentResponse.from_document(document)


@router.post(
    "/bulk-upload",
    status_code=status.HTTP_201_CREATED,
    response_model=BulkUploadResponse,
    summary="Bulk Upload Documents",
    description="""
    Upload many files into one folder.

    Individual file failures do not fail the request: inspect
    ``summary.failed`` and the per-file ``results``.
    """,
)
async def bulk_upload(
    files: list[UploadFile] | None = File(None, description="Files to upload"),
    metadata: str | None = Form(
        None, description="JSON: description, tags, folder_id or category"
    ),
    owner_id: str = Depends(get_current_owner_id),
    pipeline: BulkIngestionPipeline = Depends(get_bulk_pipeline),
):
    meta = _parse_metadata(metadata, BulkUploadMetadata)
    incoming = [await _to_incoming(upload) for upload in files or []]

    result = await pipeline.ingest(
        owner_id,
        incoming,
        SharedMetadata(
            description=meta.description,
            tags=meta.tags,
            folder_id=meta.folder_id,
            category=meta.category,
        ),
    )
    return BulkUploadResponse.from_result(result)


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    folder_id: str | None = Query(None, description="Only documents of this folder"),
    owner_id: str = Depends(get_current_owner_id),
    service: DocumentService = Depends(get_document_service),
):
    documents = await service.list_documents(owner_id, folder_id)
    return [DocumentResponse.from_document(d) for d in documents]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: DocumentService = Depends(get_document_service),
):
    return DocumentResponse.from_document(await service.get_document(owner_id, document_id))


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    update: DocumentUpdate,
    owner_id: str = Depends(get_current_owner_id),
    service: DocumentService = Depends(get_document_service),
):
    document = await service.update_document(
        owner_id, document_id, DocumentChanges(**update.model_dump())
    )
    return DocumentResponse.from_document(document)


@router.post("/{document_id}/move", response_model=DocumentResponse)
async def move_document(
    document_id: str,
    move: MoveDocumentRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: FolderService = Depends(get_folder_service),
):
    document = await service.move_document(owner_id, document_id, move.folder_id)
    return DocumentResponse.from_document(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: DocumentService = Depends(get_document_service),
):
    await service.delete_document(owner_id, document_id)


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    owner_id: str = Depends(get_current_owner_id),
    service: DocumentService = Depends(get_document_service),
):
    download = await service.open_download(owner_id, document_id)
    return StreamingResponse(
        download.stream,
        media_type=download.content_type or "application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(download.file_name)}",
        },
    )
