"""
Exception Handlers
==================

Global exception handlers for consistent error responses.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from src.api.schemas.errors import ErrorDetail, ErrorResponse
from src.shared.context import get_request_id
from src.shared.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)


def _create_error_response(
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    request_id = get_request_id()

    error = ErrorDetail(
        code=code,
        message=message,
        request_id=str(request_id) if request_id else None,
        timestamp=datetime.now(UTC),
        details=details,
    )

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error).model_dump(mode="json"),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert an AppException to a structured JSON response."""
    logger.warning(
        f"Application error: {exc.code.value} - {exc.message} "
        f"[{request.method} {request.url.path}]"
    )

    return _create_error_response(
        code=exc.code.value,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details or None,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Convert request validation errors to a user-friendly format."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(
            {
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.warning(f"Validation error: {len(errors)} errors [{request.method} {request.url.path}]")

    return _create_error_response(
        code=ErrorCode.VALIDATION_ERROR.value,
        message="Request validation failed",
        status_code=422,
        details={"errors": errors},
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handle unhandled exceptions.

    Logs the full exception and returns a safe error message.
    """
    logger.exception(
        f"Unhandled exception: {type(exc).__name__}: {exc} "
        f"[{request.method} {request.url.path}]"
    )

    return _create_error_response(
        code=ErrorCode.INTERNAL_ERROR.value,
        message="An unexpected error occurred",
        status_code=500,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
