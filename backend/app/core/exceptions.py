"""
Custom exceptions and error handlers for consistent error responses.

Every core failure carries a stable error_code discriminant plus a
descriptive message. Storage-engine faults are re-classified into
ConflictError or StorageError before they reach a caller.
"""

import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """Raised for malformed or semantically invalid requests."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class NotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": str(resource_id) if resource_id else None}
        )


class AuthorizationError(AppException):
    """Raised when the actor may not perform an action on an entity."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class InvalidTransitionError(AppException):
    """Raised when an action is not legal from the swap's current state."""

    def __init__(self, current_status: str, action: str, message: str = None, error_code: str = "ERR_STATE_001"):
        super().__init__(
            message=message or f"Cannot {action} a swap in status '{current_status}'",
            error_code=error_code,
            status_code=status.HTTP_409_CONFLICT,
            details={"current_status": current_status, "action": action}
        )


class InvalidStateError(InvalidTransitionError):
    """Raised by settlement when the swap is not in progress (covers double settlement)."""

    def __init__(self, current_status: str, action: str = "complete"):
        super().__init__(
            current_status=current_status,
            action=action,
            message=f"Swap is not in progress (status: '{current_status}')",
            error_code="ERR_STATE_002"
        )


class InsufficientCreditsError(AppException):
    """Raised when a balance is below the amount required."""

    def __init__(self, required: int, available: int):
        super().__init__(
            message=f"Insufficient credits: {required} required, {available} available",
            error_code="ERR_CREDITS_001",
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            details={"required": required, "available": available}
        )


class ConflictError(AppException):
    """Raised when a concurrent modification is detected. Safe to retry from scratch."""

    def __init__(self, message: str = "Concurrent modification detected, retry the operation"):
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"retryable": True}
        )


class StorageError(AppException):
    """Raised when the storage engine fails for a reason other than a conflict."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Storage failure during {operation}",
            error_code="ERR_STORAGE_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"operation": operation}
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": exc.errors()
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
