"""
Chunked upload endpoints.

Provides upload initiation/resume, per-part progress recording, and
completion/abort of multipart uploads.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth import get_current_user_id, require_uploader
from app.models import (
    AbortUploadResponse,
    ChunkListResponse,
    ChunkProgressResponse,
    ChunkUpdateRequest,
    CompleteUploadRequest,
    CompleteUploadResponse,
    InitUploadRequest,
    InitUploadResponse,
    PartEntry,
    PartUrlModel,
    ResumeUploadResponse,
)
from app.services import (
    ChunkUploadCoordinator,
    StorageGateway,
    UploadCompletionCoordinator,
    UploadInitiator,
    UploadLedger,
    get_storage_gateway,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads")


def get_ledger(db: Session = Depends(get_db)) -> UploadLedger:
    return UploadLedger(db)


@router.post(
    "/init",
    response_model=InitUploadResponse,
    summary="Start Chunked Upload",
    description="""
Open a multipart upload and receive one presigned URL per part.

**Workflow:** Init → PUT each part to its URL → PATCH /api/uploads/chunk per part → POST /api/uploads/complete

**Constraints:**
- **Roles:** team and admin only
- **Max File Size:** 5GB
- **Chunk Size:** 5MB default, clamped to 5MB-100MB
""",
    responses={
        400: {"description": "Invalid size or MIME type"},
        401: {"description": "Missing or invalid access token"},
        403: {"description": "Caller is not team or admin"},
    },
)
async def init_upload(
    request: InitUploadRequest,
    user_id: str = Depends(require_uploader),
    ledger: UploadLedger = Depends(get_ledger),
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> InitUploadResponse:
    logger.info(
        f"Upload init requested by {user_id}: {request.filename} "
        f"({request.total_size} bytes, {request.file_type})"
    )

    initiated = await UploadInitiator(ledger, gateway).initiate(
        user_id=user_id,
        filename=request.filename,
        content_type=request.content_type,
        total_size=request.total_size,
        file_type=request.file_type,
        project_id=request.project_id,
        client_id=request.client_id,
        chunk_size=request.chunk_size,
    )
    session = initiated.session

    return InitUploadResponse(
        upload_id=session.id,
        storage_upload_id=session.storage_upload_id,
        storage_key=session.storage_key,
        chunk_size=session.chunk_size,
        total_chunks=session.total_chunks,
        chunk_urls=[
            PartUrlModel(part_number=part.part_number, url=part.url)
            for part in initiated.chunk_urls
        ],
        expires_at=session.expires_at,
    )


@router.get(
    "/init",
    response_model=ResumeUploadResponse,
    summary="Resume Chunked Upload",
    description="Get upload details and fresh presigned URLs for the parts not yet recorded.",
    responses={
        404: {"description": "Upload not found"},
        410: {"description": "Upload expired"},
    },
)
async def resume_upload(
    upload_id: str = Query(..., alias="uploadId"),
    user_id: str = Depends(get_current_user_id),
    ledger: UploadLedger = Depends(get_ledger),
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> ResumeUploadResponse:
    resumed = await UploadInitiator(ledger, gateway).resume(upload_id, user_id)
    session = resumed.session

    return ResumeUploadResponse(
        upload_id=session.id,
        storage_upload_id=session.storage_upload_id,
        storage_key=session.storage_key,
        filename=session.filename,
        status=session.status,
        total_size=session.total_size,
        chunk_size=session.chunk_size,
        total_chunks=session.total_chunks,
        chunks_uploaded=session.chunks_uploaded,
        bytes_uploaded=session.bytes_uploaded,
        uploaded_parts=[PartEntry(**part) for part in session.uploaded_parts or []],
        remaining_chunk_urls=[
            PartUrlModel(part_number=part.part_number, url=part.url)
            for part in resumed.chunk_urls
        ],
        expires_at=session.expires_at,
    )


@router.patch(
    "/chunk",
    response_model=ChunkProgressResponse,
    summary="Record Uploaded Part",
    description="""
Record one part the client has uploaded to its presigned URL.

Idempotent per part number: repeating the call returns the current progress
unchanged. `isComplete` only means every part has been seen; the upload must
still be finalized with POST /api/uploads/complete.
""",
    responses={
        400: {"description": "Upload not in progress or invalid part number"},
        403: {"description": "Upload belongs to another user"},
        404: {"description": "Upload not found"},
    },
)
async def record_chunk(
    request: ChunkUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    ledger: UploadLedger = Depends(get_ledger),
) -> ChunkProgressResponse:
    progress = ChunkUploadCoordinator(ledger).record_part(
        upload_id=request.upload_id,
        user_id=user_id,
        part_number=request.part_number,
        etag=request.etag,
        bytes_uploaded=request.bytes_uploaded,
    )

    return ChunkProgressResponse(
        upload_id=request.upload_id,
        part_number=request.part_number,
        chunks_uploaded=progress.chunks_uploaded,
        bytes_uploaded=progress.bytes_uploaded,
        total_chunks=progress.total_chunks,
        total_size=progress.total_size,
        progress=progress.progress_percent,
        is_complete=progress.is_complete,
    )


@router.get(
    "/chunk",
    response_model=ChunkListResponse,
    summary="List Uploaded Parts",
    description="List recorded part numbers so a client can re-upload only the missing ones.",
    responses={
        403: {"description": "Upload belongs to another user"},
        404: {"description": "Upload not found"},
    },
)
async def list_chunks(
    upload_id: str = Query(..., alias="uploadId"),
    user_id: str = Depends(get_current_user_id),
    ledger: UploadLedger = Depends(get_ledger),
) -> ChunkListResponse:
    listing = ChunkUploadCoordinator(ledger).list_parts(upload_id, user_id)
    progress = listing.progress

    return ChunkListResponse(
        upload_id=listing.upload_id,
        status=listing.status,
        total_chunks=progress.total_chunks,
        chunk_size=listing.chunk_size,
        chunks_uploaded=progress.chunks_uploaded,
        bytes_uploaded=progress.bytes_uploaded,
        total_size=progress.total_size,
        uploaded_parts=listing.part_numbers,
        progress=progress.progress_percent,
    )


@router.post(
    "/complete",
    response_model=CompleteUploadResponse,
    summary="Complete Chunked Upload",
    description="""
Finalize the multipart upload and create the media asset.

Parts may be listed in any order but must cover exactly the upload's part
count. Videos get a transcode job and images a thumbnail job.
""",
    responses={
        400: {"description": "Wrong part count, already completed, or aborted"},
        403: {"description": "Upload belongs to another user"},
        404: {"description": "Upload not found"},
        500: {"description": "Storage rejected finalization"},
    },
)
async def complete_upload(
    request: CompleteUploadRequest,
    user_id: str = Depends(get_current_user_id),
    ledger: UploadLedger = Depends(get_ledger),
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> CompleteUploadResponse:
    parts = [{"partNumber": p.part_number, "etag": p.etag} for p in request.parts]
    result = await UploadCompletionCoordinator(ledger, gateway).complete(
        request.upload_id, user_id, parts
    )

    return CompleteUploadResponse(
        upload_id=result.upload_id,
        asset_id=result.asset_id,
        location=result.storage_location,
        storage_key=result.storage_key,
        filename=result.filename,
        total_size=result.total_size,
    )


@router.delete(
    "/complete",
    response_model=AbortUploadResponse,
    summary="Abort Chunked Upload",
    description="Cancel an upload. Safe to repeat; completed uploads are left as they are.",
    responses={
        403: {"description": "Upload belongs to another user"},
        404: {"description": "Upload not found"},
    },
)
async def abort_upload(
    upload_id: str = Query(..., alias="uploadId"),
    user_id: str = Depends(get_current_user_id),
    ledger: UploadLedger = Depends(get_ledger),
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> AbortUploadResponse:
    await UploadCompletionCoordinator(ledger, gateway).abort(upload_id, user_id)
    return AbortUploadResponse()
