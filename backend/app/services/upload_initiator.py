"""
Upload Initiator Service

Opens multipart uploads in storage, creates their ledger records and
hands out presigned part URLs, including fresh URLs for resuming.
"""

import logging
import math
import re
import time
from dataclasses import dataclass
from datetime import timedelta, timezone
from typing import Dict, List, Optional

from app.config import settings
from app.middleware.error_handler import (
    InvalidStateError,
    UploadExpiredError,
    UploadRequestError,
)
from app.tables import UploadSession, UploadStatus, utcnow

from .audit_log import UploadStartedEvent, record_audit_event
from .storage_gateway import StorageGateway
from .upload_ledger import UploadLedger

logger = logging.getLogger(__name__)

ALLOWED_MIMES: Dict[str, List[str]] = {
    "raw": ["video/*", "image/*", "application/zip", "application/x-rar-compressed"],
    "deliverable": [
        "video/mp4", "video/webm", "image/jpeg", "image/png", "image/webp",
        "application/pdf", "application/zip",
    ],
    "portfolio": ["video/mp4", "video/webm", "image/jpeg", "image/png", "image/webp"],
    "team-wip": [
        "video/*", "image/*", "application/zip", "application/x-rar-compressed",
        "application/pdf",
    ],
}


def is_allowed_mime(content_type: str, file_type: str) -> bool:
    """Check a MIME type against the patterns allowed for a file type."""
    for pattern in ALLOWED_MIMES.get(file_type, []):
        if pattern.endswith("/*"):
            if content_type.startswith(pattern[:-1]):
                return True
        elif content_type == pattern:
            return True
    return False


def clamp_chunk_size(requested: Optional[int]) -> int:
    chunk_size = requested or settings.DEFAULT_CHUNK_SIZE
    return max(settings.MIN_CHUNK_SIZE, min(settings.MAX_CHUNK_SIZE, chunk_size))


def build_storage_key(
    file_type: str,
    filename: str,
    user_id: str,
    project_id: Optional[str] = None,
    client_id: Optional[str] = None,
) -> str:
    """
    Build the storage key for a new upload following the studio folder layout.

    Examples:
        portfolio    -> public/portfolio/{project|general}/{ts}_{name}
        deliverable  -> clients/{client}/{project}/deliverables/{ts}_{name}
        raw          -> clients/{client}/{project}/raw/{ts}_{name}
        team-wip     -> team/{user}/work_in_progress/{ts}_{name}
    """
    sanitized = re.sub(r"[^a-zA-Z0-9.-]", "_", filename)
    unique_name = f"{int(time.time() * 1000)}_{sanitized}"

    if file_type == "portfolio":
        return f"public/portfolio/{project_id or 'general'}/{unique_name}"
    if file_type == "deliverable":
        if client_id and project_id:
            return f"clients/{client_id}/{project_id}/deliverables/{unique_name}"
        return f"deliverables/{project_id or 'general'}/{unique_name}"
    if file_type == "raw":
        if client_id and project_id:
            return f"clients/{client_id}/{project_id}/raw/{unique_name}"
        return f"raw/{project_id or 'general'}/{unique_name}"
    if file_type == "team-wip":
        return f"team/{user_id}/work_in_progress/{unique_name}"
    return f"uploads/{unique_name}"


@dataclass(frozen=True)
class PartUrl:
    part_number: int
    url: str


@dataclass(frozen=True)
class InitiatedUpload:
    session: UploadSession
    chunk_urls: List[PartUrl]


class UploadInitiator:
    """Creates upload sessions and issues presigned part URLs."""

    def __init__(self, ledger: UploadLedger, gateway: StorageGateway):
        self.ledger = ledger
        self.gateway = gateway

    async def initiate(
        self,
        user_id: str,
        filename: str,
        content_type: str,
        total_size: int,
        file_type: str,
        project_id: Optional[str] = None,
        client_id: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> InitiatedUpload:
        """
        Start a multipart upload.

        Raises:
            UploadRequestError: If the size or MIME type is not accepted
            StorageGatewayError: If storage refuses to open the upload
        """
        if total_size <= 0:
            raise UploadRequestError("File size must be positive")
        if total_size > settings.MAX_UPLOAD_SIZE:
            raise UploadRequestError(
                f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE} bytes",
                {"max_size": settings.MAX_UPLOAD_SIZE},
            )
        if not is_allowed_mime(content_type, file_type):
            raise UploadRequestError(
                f"File type {content_type} not allowed for {file_type} uploads"
            )

        chunk_size = clamp_chunk_size(chunk_size)
        total_chunks = math.ceil(total_size / chunk_size)
        storage_key = build_storage_key(file_type, filename, user_id, project_id, client_id)

        storage_upload_id = await self.gateway.create_multipart_upload(storage_key, content_type)
        chunk_urls = await self._presign(storage_key, storage_upload_id, range(1, total_chunks + 1))

        session = self.ledger.create(
            storage_upload_id=storage_upload_id,
            user_id=user_id,
            project_id=project_id,
            filename=filename,
            mime_type=content_type,
            file_type=file_type,
            storage_key=storage_key,
            total_size=total_size,
            chunk_size=chunk_size,
            total_chunks=total_chunks,
            expires_at=utcnow() + timedelta(hours=settings.UPLOAD_SESSION_TTL_HOURS),
        )

        record_audit_event(
            self.ledger.db,
            user_id,
            UploadStartedEvent(
                upload_id=session.id,
                filename=filename,
                total_size=total_size,
                total_chunks=total_chunks,
                file_type=file_type,
            ),
        )
        return InitiatedUpload(session=session, chunk_urls=chunk_urls)

    async def resume(self, upload_id: str, user_id: str) -> InitiatedUpload:
        """
        Reissue presigned URLs for the parts not yet recorded.

        Raises:
            UploadNotFoundError: If the session does not exist
            ForbiddenError: If the caller does not own the session
            InvalidStateError: If the session is completed or aborted
            UploadExpiredError: If the session is past its expiry
        """
        session = self.ledger.get_owned(upload_id, user_id)
        if session.status != UploadStatus.IN_PROGRESS:
            raise InvalidStateError(upload_id, session.status)

        expires_at = session.expires_at
        if expires_at is not None:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at < utcnow():
                raise UploadExpiredError(upload_id)

        recorded = {part["partNumber"] for part in session.uploaded_parts or []}
        remaining = [n for n in range(1, session.total_chunks + 1) if n not in recorded]
        chunk_urls = await self._presign(session.storage_key, session.storage_upload_id, remaining)

        logger.info(f"Resuming upload {upload_id}: {len(remaining)} parts remaining")
        return InitiatedUpload(session=session, chunk_urls=chunk_urls)

    async def _presign(self, key: str, storage_upload_id: str, part_numbers) -> List[PartUrl]:
        return [
            PartUrl(
                part_number=n,
                url=await self.gateway.presign_part_url(
                    key, storage_upload_id, n, settings.PRESIGNED_URL_TTL
                ),
            )
            for n in part_numbers
        ]
