"""Pydantic models for chunk progress endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ChunkUpdateRequest(BaseModel):
    """
    Request body for PATCH /api/uploads/chunk.

    Sent by the client after each part upload to a presigned URL succeeds.
    """

    upload_id: str = Field(
        ...,
        alias="uploadId",
        min_length=1,
        description="Upload session id from /api/uploads/init",
    )
    part_number: int = Field(
        ...,
        alias="partNumber",
        ge=1,
        description="1-based part number",
    )
    etag: str = Field(
        ...,
        min_length=1,
        description="ETag returned by storage for the part",
    )
    bytes_uploaded: Optional[int] = Field(
        None,
        alias="bytesUploaded",
        ge=0,
        description="Bytes in the part (defaults to the session chunk size)",
    )

    model_config = {"populate_by_name": True}


class ChunkProgressResponse(BaseModel):
    """Response body for PATCH /api/uploads/chunk."""

    success: bool = True
    upload_id: str = Field(..., alias="uploadId")
    part_number: int = Field(..., alias="partNumber")
    chunks_uploaded: int = Field(..., alias="chunksUploaded")
    bytes_uploaded: int = Field(..., alias="bytesUploaded")
    total_chunks: int = Field(..., alias="totalChunks")
    total_size: int = Field(..., alias="totalSize")
    progress: int = Field(..., ge=0, le=100, description="Percent of parts recorded")
    is_complete: bool = Field(
        ...,
        alias="isComplete",
        description="All parts recorded; the upload still needs /api/uploads/complete",
    )

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "success": True,
                    "uploadId": "550e8400-e29b-41d4-a716-446655440000",
                    "partNumber": 2,
                    "chunksUploaded": 2,
                    "bytesUploaded": 6000000,
                    "totalChunks": 3,
                    "totalSize": 9000000,
                    "progress": 67,
                    "isComplete": False,
                }
            ]
        },
    }


class ChunkListResponse(BaseModel):
    """Response body for GET /api/uploads/chunk, used to resume uploads."""

    upload_id: str = Field(..., alias="uploadId")
    status: str = Field(..., description="in_progress, completed or aborted")
    total_chunks: int = Field(..., alias="totalChunks")
    chunk_size: int = Field(..., alias="chunkSize")
    chunks_uploaded: int = Field(..., alias="chunksUploaded")
    bytes_uploaded: int = Field(..., alias="bytesUploaded")
    total_size: int = Field(..., alias="totalSize")
    uploaded_parts: List[int] = Field(..., alias="uploadedParts")
    progress: int = Field(..., ge=0, le=100)

    model_config = {"populate_by_name": True}
