"""
Chunk Upload Coordinator

Records parts the client has uploaded directly to storage and reports
cumulative progress. Never touches part payloads or the storage backend.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .upload_ledger import UploadLedger, UploadProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartListing:
    """Recorded parts of an upload session, for client-side resume."""

    upload_id: str
    status: str
    chunk_size: int
    part_numbers: List[int]
    progress: UploadProgress


class ChunkUploadCoordinator:
    """Bookkeeping for part arrivals on one caller's upload sessions."""

    def __init__(self, ledger: UploadLedger):
        self.ledger = ledger

    def record_part(
        self,
        upload_id: str,
        user_id: str,
        part_number: int,
        etag: str,
        bytes_uploaded: Optional[int] = None,
    ) -> UploadProgress:
        """
        Record that one part reached storage.

        Re-recording a known part number returns the current progress
        unchanged, so clients can safely retry the notification.

        Args:
            upload_id: Upload session id
            user_id: Verified caller id
            part_number: 1-based part number
            etag: Part identifier returned by storage
            bytes_uploaded: Bytes in the part (chunk size when omitted)

        Returns:
            UploadProgress: Counters after the call

        Raises:
            UploadNotFoundError: If the session does not exist
            ForbiddenError: If the caller does not own the session
            InvalidStateError: If the session is completed or aborted
            InvalidPartNumberError: If part_number is outside 1..total_chunks
        """
        session = self.ledger.get_owned(upload_id, user_id)
        recorded = self.ledger.add_part(session, part_number, etag, bytes_uploaded)

        progress = UploadProgress.of(session)
        if recorded:
            logger.info(
                f"Recorded part {part_number} for upload {upload_id}: "
                f"{progress.chunks_uploaded}/{progress.total_chunks} parts, "
                f"{progress.progress_percent}%"
            )
        return progress

    def list_parts(self, upload_id: str, user_id: str) -> PartListing:
        """Return recorded part numbers in arrival order with progress."""
        session = self.ledger.get_owned(upload_id, user_id)
        return PartListing(
            upload_id=session.id,
            status=session.status,
            chunk_size=session.chunk_size,
            part_numbers=[part["partNumber"] for part in session.uploaded_parts or []],
            progress=UploadProgress.of(session),
        )
