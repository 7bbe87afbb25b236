"""
Error Response Schemas
======================

Pydantic models for consistent error responses.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    request_id: str | None = Field(None, description="Request ID for correlation")
    timestamp: datetime | None = Field(None, description="When the error occurred")
    details: dict[str, Any] | None = Field(None, description="Additional context")


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    error: ErrorDetail

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": {
                    "code": "CONFLICT",
                    "message": "A folder named 'Invoices' already exists",
                    "request_id": "0b6f7c3e-2a41-4c1e-9d0e-5f1f3c2b7a10",
                    "timestamp": "2024-01-15T10:30:00Z",
                    "details": {"folder_name": "Invoices"},
                }
            }
        }
    }


class ConfirmationRequiredResponse(BaseModel):
    """Returned with 409 when deleting a non-empty folder without ``force``."""

    requires_confirmation: bool = True
    message: str
    folder_name: str
    document_count: int
