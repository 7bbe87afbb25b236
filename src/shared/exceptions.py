"""
Application Exceptions
======================

Typed exceptions raised by the core and translated to HTTP responses by
``src.api.middleware.exceptions``.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    STORAGE_ERROR = "STORAGE_ERROR"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """
    Base class for errors that carry their own response semantics.

    Attributes:
        code: Error code exposed to clients
        message: Human-readable message
        status_code: HTTP status used by the API layer
        details: Optional structured context
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(AppException):
    """Malformed input: bad folder name, missing file fields, oversized file."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class ConflictError(AppException):
    """A folder with the requested name already exists."""

    code = ErrorCode.CONFLICT
    status_code = 409


class ForbiddenError(AppException):
    """The operation is not allowed on a protected folder."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class NotFoundError(AppException):
    """A folder or document id does not resolve for the given owner."""

    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} not found: {identifier}",
            details={"resource": resource, "identifier": identifier},
        )


class StorageError(AppException):
    """The content store rejected or failed an operation."""

    code = ErrorCode.STORAGE_ERROR
    status_code = 502

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message, details={"key": key} if key else None)
        self.key = key


class UnauthorizedError(AppException):
    """No owner could be determined for the request."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401
