"""Pydantic models for upload completion and abort endpoints."""

from typing import List

from pydantic import BaseModel, Field


class PartEntry(BaseModel):
    part_number: int = Field(..., alias="partNumber", ge=1)
    etag: str = Field(..., min_length=1)

    model_config = {"populate_by_name": True}


class CompleteUploadRequest(BaseModel):
    """
    Request body for POST /api/uploads/complete.

    Parts may be listed in any order; they are sorted before finalization.
    """

    upload_id: str = Field(..., alias="uploadId", min_length=1)
    parts: List[PartEntry] = Field(
        ...,
        description="Every part of the upload as {partNumber, etag}",
    )

    model_config = {"populate_by_name": True}


class CompleteUploadResponse(BaseModel):
    """Response body for POST /api/uploads/complete."""

    success: bool = True
    upload_id: str = Field(..., alias="uploadId")
    asset_id: str = Field(..., alias="assetId", description="Created media asset id")
    location: str = Field(..., description="Final object location in storage")
    storage_key: str = Field(..., alias="storageKey")
    filename: str
    total_size: int = Field(..., alias="totalSize")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "success": True,
                    "uploadId": "550e8400-e29b-41d4-a716-446655440000",
                    "assetId": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
                    "location": "https://media.example.com/raw/general/1767225600000_clip.mp4",
                    "storageKey": "raw/general/1767225600000_clip.mp4",
                    "filename": "clip.mp4",
                    "totalSize": 9000000,
                }
            ]
        },
    }


class AbortUploadResponse(BaseModel):
    success: bool = True
    message: str = "Upload aborted"
