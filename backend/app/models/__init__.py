"""Pydantic models for API request/response schemas."""

from .chunk import ChunkListResponse, ChunkProgressResponse, ChunkUpdateRequest
from .completion import (
    AbortUploadResponse,
    CompleteUploadRequest,
    CompleteUploadResponse,
    PartEntry,
)
from .lead import LeadRequest, LeadResponse, RateLimitStatusResponse
from .upload_init import (
    InitUploadRequest,
    InitUploadResponse,
    PartUrlModel,
    ResumeUploadResponse,
)

__all__ = [
    "ChunkUpdateRequest",
    "ChunkProgressResponse",
    "ChunkListResponse",
    "PartEntry",
    "CompleteUploadRequest",
    "CompleteUploadResponse",
    "AbortUploadResponse",
    "LeadRequest",
    "LeadResponse",
    "RateLimitStatusResponse",
    "InitUploadRequest",
    "InitUploadResponse",
    "PartUrlModel",
    "ResumeUploadResponse",
]
