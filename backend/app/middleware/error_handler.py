"""
Centralized error handling middleware for FastAPI.

Provides consistent error responses and logging for all API routes.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class UploadServiceError(Exception):
    """Base exception for caller-visible service errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Any = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details
        self.headers = headers
        super().__init__(message)


class UnauthorizedError(UploadServiceError):
    """Raised when the request carries no valid access token."""

    def __init__(self, reason: str = "Unauthorized"):
        super().__init__(message=reason, status_code=401)


class ForbiddenError(UploadServiceError):
    """Raised when the caller does not own the resource or lacks the role."""

    def __init__(self, message: str = "Insufficient permissions", details: Any = None):
        super().__init__(message=message, status_code=403, details=details)


class UploadNotFoundError(UploadServiceError):
    """Raised when the referenced upload session does not exist."""

    def __init__(self, upload_id: str):
        super().__init__(
            message="Upload not found",
            status_code=404,
            details={"upload_id": upload_id},
        )


class UploadExpiredError(UploadServiceError):
    """Raised when resuming an upload session past its expiry."""

    def __init__(self, upload_id: str):
        super().__init__(
            message="Upload expired",
            status_code=410,
            details={"upload_id": upload_id},
        )


class InvalidStateError(UploadServiceError):
    """Raised when an operation targets a session in the wrong lifecycle state."""

    def __init__(self, upload_id: str, status: str):
        super().__init__(
            message=f"Upload is {status}, cannot update",
            status_code=400,
            details={"upload_id": upload_id, "status": status},
        )


class AlreadyCompletedError(UploadServiceError):
    """Raised when completing an upload that is already completed."""

    def __init__(self, upload_id: str):
        super().__init__(
            message="Upload already completed",
            status_code=400,
            details={"upload_id": upload_id},
        )


class IncompletePartSetError(UploadServiceError):
    """Raised when the completion part list does not cover exactly the upload's parts."""

    def __init__(
        self,
        expected: int,
        received: int,
        missing: list[int] | None = None,
        unexpected: list[int] | None = None,
    ):
        details = {"expected": expected, "received": received}
        if missing:
            details["missing"] = missing
        if unexpected:
            details["unexpected"] = unexpected
        super().__init__(
            message=f"Expected {expected} parts, received {received}",
            status_code=400,
            details=details,
        )


class InvalidPartNumberError(UploadServiceError):
    """Raised when a part number falls outside 1..total_chunks."""

    def __init__(self, part_number: int, total_chunks: int):
        super().__init__(
            message=f"Invalid part number. Must be between 1 and {total_chunks}",
            status_code=400,
            details={"part_number": part_number, "total_chunks": total_chunks},
        )


class StorageCompletionFailedError(UploadServiceError):
    """Raised when the storage gateway rejects multipart finalization."""

    def __init__(self, upload_id: str, reason: str):
        super().__init__(
            message="Failed to complete upload",
            status_code=500,
            details={"upload_id": upload_id, "reason": reason},
        )


class UploadRequestError(UploadServiceError):
    """Raised when upload initiation parameters are rejected."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message=message, status_code=400, details=details)


class RateLimitedError(UploadServiceError):
    """Raised when a client exceeds the lead intake rate limit."""

    def __init__(self, retry_after: int, limit: int, reset_at: float):
        super().__init__(
            message="Too many requests. Please try again later.",
            status_code=429,
            details={"retryAfter": retry_after},
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(int(reset_at)),
            },
        )


class ValidationFailedError(UploadServiceError):
    """Raised when submitted lead data fails validation."""

    def __init__(self, errors: list[str]):
        super().__init__(
            message="Validation failed",
            status_code=400,
            details=errors,
        )


def error_response(exc: UploadServiceError) -> JSONResponse:
    """Render a service error as a JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": exc.details,
        },
        headers=exc.headers,
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response

        except UploadServiceError as e:
            logger.warning(
                f"{type(e).__name__}: {e.message}",
                extra={"status_code": e.status_code, "details": e.details},
            )
            return error_response(e)

        except Exception as e:
            # Log full stack trace for unexpected errors
            logger.exception(f"Unhandled exception: {str(e)}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) if logger.isEnabledFor(logging.DEBUG) else None,
                },
            )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and query strings as 400."""
    logger.warning(f"Request validation failed for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "details": jsonable_encoder(exc.errors()),
        },
    )
