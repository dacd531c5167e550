"""Pydantic models for starting and resuming chunked uploads."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .completion import PartEntry


class InitUploadRequest(BaseModel):
    """Request body for POST /api/uploads/init."""

    filename: str = Field(..., min_length=1)
    content_type: str = Field(..., alias="contentType", min_length=1)
    total_size: int = Field(..., alias="totalSize", description="File size in bytes")
    file_type: Literal["raw", "deliverable", "portfolio", "team-wip"] = Field(
        ...,
        alias="fileType",
    )
    project_id: Optional[str] = Field(None, alias="projectId")
    client_id: Optional[str] = Field(None, alias="clientId")
    chunk_size: Optional[int] = Field(
        None,
        alias="chunkSize",
        description="Requested chunk size in bytes, clamped to 5MB-100MB",
    )

    model_config = {"populate_by_name": True}


class PartUrlModel(BaseModel):
    part_number: int = Field(..., alias="partNumber")
    url: str

    model_config = {"populate_by_name": True}


class InitUploadResponse(BaseModel):
    """Response body for POST /api/uploads/init."""

    upload_id: str = Field(..., alias="uploadId")
    storage_upload_id: str = Field(..., alias="storageUploadId")
    storage_key: str = Field(..., alias="storageKey")
    chunk_size: int = Field(..., alias="chunkSize")
    total_chunks: int = Field(..., alias="totalChunks")
    chunk_urls: List[PartUrlModel] = Field(..., alias="chunkUrls")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")

    model_config = {"populate_by_name": True}


class ResumeUploadResponse(BaseModel):
    """Response body for GET /api/uploads/init."""

    upload_id: str = Field(..., alias="uploadId")
    storage_upload_id: str = Field(..., alias="storageUploadId")
    storage_key: str = Field(..., alias="storageKey")
    filename: str
    status: str
    total_size: int = Field(..., alias="totalSize")
    chunk_size: int = Field(..., alias="chunkSize")
    total_chunks: int = Field(..., alias="totalChunks")
    chunks_uploaded: int = Field(..., alias="chunksUploaded")
    bytes_uploaded: int = Field(..., alias="bytesUploaded")
    uploaded_parts: List[PartEntry] = Field(..., alias="uploadedParts")
    remaining_chunk_urls: List[PartUrlModel] = Field(..., alias="remainingChunkUrls")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")

    model_config = {"populate_by_name": True}
