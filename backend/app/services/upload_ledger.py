"""
Upload Ledger Service

Data access for upload session records and the mutations that keep their
counters consistent: recording parts and the two terminal transitions.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from app.middleware.error_handler import (
    ForbiddenError,
    InvalidPartNumberError,
    InvalidStateError,
    UploadNotFoundError,
)
from app.tables import UploadSession, UploadStatus, utcnow

from .storage_gateway import CompletedPart

logger = logging.getLogger(__name__)


def progress_percent(chunks_uploaded: int, total_chunks: int) -> int:
    """Percentage of parts recorded, rounded half up."""
    if total_chunks <= 0:
        return 0
    return math.floor(100 * chunks_uploaded / total_chunks + 0.5)


@dataclass(frozen=True)
class UploadProgress:
    """Snapshot of an upload session's counters."""

    chunks_uploaded: int
    bytes_uploaded: int
    total_chunks: int
    total_size: int

    @classmethod
    def of(cls, session: UploadSession) -> "UploadProgress":
        return cls(
            chunks_uploaded=session.chunks_uploaded,
            bytes_uploaded=session.bytes_uploaded,
            total_chunks=session.total_chunks,
            total_size=session.total_size,
        )

    @property
    def progress_percent(self) -> int:
        return progress_percent(self.chunks_uploaded, self.total_chunks)

    @property
    def is_complete(self) -> bool:
        """All parts seen; says nothing about finalization."""
        return self.chunks_uploaded == self.total_chunks


class UploadLedger:
    """
    Reads and mutates UploadSession rows.

    Handles:
    - Ownership-checked lookup
    - Idempotent part recording with clamped byte counters
    - One-way transitions to completed or aborted
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields) -> UploadSession:
        session = UploadSession(
            status=UploadStatus.IN_PROGRESS,
            uploaded_parts=[],
            chunks_uploaded=0,
            bytes_uploaded=0,
            **fields,
        )
        self.db.add(session)
        self.db.commit()
        logger.info(
            f"Created upload session {session.id} for {session.filename} "
            f"({session.total_chunks} parts)"
        )
        return session

    def get(self, upload_id: str) -> Optional[UploadSession]:
        return self.db.get(UploadSession, upload_id)

    def get_owned(self, upload_id: str, user_id: str) -> UploadSession:
        """
        Load an upload session on behalf of a caller.

        Raises:
            UploadNotFoundError: If no session has this id
            ForbiddenError: If the session belongs to another user
        """
        session = self.get(upload_id)
        if session is None:
            logger.warning(f"Upload session not found: {upload_id}")
            raise UploadNotFoundError(upload_id)
        if session.user_id != user_id:
            logger.warning(f"User {user_id} does not own upload session {upload_id}")
            raise ForbiddenError("Upload belongs to another user", {"upload_id": upload_id})
        return session

    def add_part(
        self,
        session: UploadSession,
        part_number: int,
        etag: str,
        bytes_uploaded: Optional[int] = None,
    ) -> bool:
        """
        Record one uploaded part.

        Args:
            session: Upload session to update
            part_number: 1-based part number
            etag: Part identifier returned by storage
            bytes_uploaded: Bytes in the part (session chunk size when falsy)

        Returns:
            bool: False if the part was already recorded (nothing changed)

        Raises:
            InvalidStateError: If the session is not in progress
            InvalidPartNumberError: If part_number is outside 1..total_chunks
        """
        if session.status != UploadStatus.IN_PROGRESS:
            raise InvalidStateError(session.id, session.status)
        if not 1 <= part_number <= session.total_chunks:
            raise InvalidPartNumberError(part_number, session.total_chunks)

        existing = list(session.uploaded_parts or [])
        if any(part["partNumber"] == part_number for part in existing):
            logger.info(f"Part {part_number} of upload {session.id} already recorded")
            return False

        session.uploaded_parts = existing + [{"partNumber": part_number, "etag": etag}]
        session.chunks_uploaded = session.chunks_uploaded + 1
        session.bytes_uploaded = min(
            session.bytes_uploaded + (bytes_uploaded or session.chunk_size),
            session.total_size,
        )
        session.last_activity_at = utcnow()
        self.db.commit()
        return True

    def mark_completed(
        self, session: UploadSession, parts: List[CompletedPart], commit: bool = True
    ) -> None:
        """Move an in-progress session to completed with its counters maxed out."""
        if session.status != UploadStatus.IN_PROGRESS:
            raise InvalidStateError(session.id, session.status)

        session.status = UploadStatus.COMPLETED
        session.completed_at = utcnow()
        session.uploaded_parts = [
            {"partNumber": part["partNumber"], "etag": part["etag"]} for part in parts
        ]
        session.chunks_uploaded = session.total_chunks
        session.bytes_uploaded = session.total_size
        if commit:
            self.db.commit()

    def mark_aborted(self, session: UploadSession) -> bool:
        """
        Move an in-progress session to aborted.

        Returns:
            bool: False if the session was already terminal (left untouched)
        """
        if session.status in UploadStatus.TERMINAL:
            return False

        session.status = UploadStatus.ABORTED
        session.completed_at = utcnow()
        self.db.commit()
        return True
