"""FastAPI middleware for request/response processing."""

from .error_handler import (
    ErrorHandlerMiddleware,
    UploadServiceError,
    UnauthorizedError,
    ForbiddenError,
    UploadNotFoundError,
    UploadExpiredError,
    InvalidStateError,
    AlreadyCompletedError,
    IncompletePartSetError,
    InvalidPartNumberError,
    StorageCompletionFailedError,
    UploadRequestError,
    RateLimitedError,
    ValidationFailedError,
    error_response,
    request_validation_handler,
)

__all__ = [
    "ErrorHandlerMiddleware",
    "UploadServiceError",
    "UnauthorizedError",
    "ForbiddenError",
    "UploadNotFoundError",
    "UploadExpiredError",
    "InvalidStateError",
    "AlreadyCompletedError",
    "IncompletePartSetError",
    "InvalidPartNumberError",
    "StorageCompletionFailedError",
    "UploadRequestError",
    "RateLimitedError",
    "ValidationFailedError",
    "error_response",
    "request_validation_handler",
]
