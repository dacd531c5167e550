"""
Upload Completion Coordinator

Finalizes multipart uploads in storage, moves the ledger to its terminal
state and materializes the media asset record.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from app.middleware.error_handler import (
    AlreadyCompletedError,
    IncompletePartSetError,
    InvalidStateError,
    StorageCompletionFailedError,
)
from app.tables import MediaAsset, UploadStatus

from .audit_log import UploadAbortedEvent, UploadCompletedEvent, record_audit_event
from .processing_jobs import enqueue_processing_job
from .storage_gateway import CompletedPart, StorageGateway, StorageGatewayError
from .upload_ledger import UploadLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionResult:
    upload_id: str
    asset_id: str
    storage_location: str
    storage_key: str
    filename: str
    total_size: int


class UploadCompletionCoordinator:
    """
    Drives an upload session to completed or aborted.

    Completion is not idempotent: a second call on a completed session
    fails. Abort is idempotent.
    """

    def __init__(self, ledger: UploadLedger, gateway: StorageGateway):
        self.ledger = ledger
        self.gateway = gateway

    async def complete(
        self, upload_id: str, user_id: str, parts: List[CompletedPart]
    ) -> CompletionResult:
        """
        Finalize a multipart upload exactly once.

        Args:
            upload_id: Upload session id
            user_id: Verified caller id
            parts: Every part as {partNumber, etag}, in any order

        Returns:
            CompletionResult: Asset id and final storage location

        Raises:
            UploadNotFoundError: If the session does not exist
            ForbiddenError: If the caller does not own the session
            AlreadyCompletedError: If the session was already completed
            InvalidStateError: If the session was aborted
            IncompletePartSetError: If the part numbers are not exactly 1..total_chunks
            StorageCompletionFailedError: If storage rejects finalization
        """
        session = self.ledger.get_owned(upload_id, user_id)

        if session.status == UploadStatus.COMPLETED:
            raise AlreadyCompletedError(upload_id)
        if session.status != UploadStatus.IN_PROGRESS:
            raise InvalidStateError(upload_id, session.status)
        if len(parts) != session.total_chunks:
            raise IncompletePartSetError(session.total_chunks, len(parts))

        part_numbers = [part["partNumber"] for part in parts]
        expected = set(range(1, session.total_chunks + 1))
        distinct = set(part_numbers)
        if distinct != expected:
            raise IncompletePartSetError(
                session.total_chunks,
                len(distinct),
                missing=sorted(expected - distinct),
                unexpected=sorted(
                    {n for n in part_numbers if n not in expected or part_numbers.count(n) > 1}
                ),
            )

        # Storage requires strictly ascending part numbers
        sorted_parts = sorted(parts, key=lambda part: part["partNumber"])

        try:
            location = await self.gateway.complete_multipart_upload(
                session.storage_key, session.storage_upload_id, sorted_parts
            )
        except StorageGatewayError as e:
            logger.error(f"Storage rejected completion of upload {upload_id}: {e}")
            raise StorageCompletionFailedError(upload_id, str(e))

        db = self.ledger.db
        storage_key = session.storage_key
        asset = MediaAsset(
            uploaded_by=user_id,
            project_id=session.project_id,
            filename=session.filename,
            storage_key=session.storage_key,
            mime_type=session.mime_type,
            file_size=session.total_size,
            file_type=session.file_type,
            upload_status="complete",
            storage_class="standard",
        )
        try:
            self.ledger.mark_completed(session, sorted_parts, commit=False)
            db.add(asset)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            # Multipart upload is closed in storage; the object needs manual reconciliation
            logger.exception(
                f"Failed to record completion of upload {upload_id}: "
                f"object {storage_key} already finalized at {location}"
            )
            raise

        logger.info(f"Upload {upload_id} completed as asset {asset.id} at {location}")

        try:
            enqueue_processing_job(db, asset)
        except SQLAlchemyError as e:
            # Asset row is already committed
            db.rollback()
            logger.error(f"Failed to queue processing job for asset {asset.id}: {e}")

        record_audit_event(
            db,
            user_id,
            UploadCompletedEvent(
                upload_id=upload_id,
                asset_id=asset.id,
                filename=session.filename,
                total_size=session.total_size,
                total_parts=len(sorted_parts),
                storage_key=session.storage_key,
            ),
        )

        return CompletionResult(
            upload_id=upload_id,
            asset_id=asset.id,
            storage_location=location,
            storage_key=session.storage_key,
            filename=session.filename,
            total_size=session.total_size,
        )

    async def abort(self, upload_id: str, user_id: str) -> None:
        """
        Abort an upload session.

        The storage-side abort is best-effort; the ledger transition happens
        regardless. Aborting a completed or aborted session changes nothing.

        Raises:
            UploadNotFoundError: If the session does not exist
            ForbiddenError: If the caller does not own the session
        """
        session = self.ledger.get_owned(upload_id, user_id)

        if session.status == UploadStatus.IN_PROGRESS:
            try:
                await self.gateway.abort_multipart_upload(
                    session.storage_key, session.storage_upload_id
                )
            except StorageGatewayError as e:
                logger.warning(f"Storage abort failed for upload {upload_id}: {e}")

        # Completed sessions stay completed; an abort never rewrites a terminal state
        if not self.ledger.mark_aborted(session):
            logger.info(f"Upload {upload_id} already {session.status}, abort is a no-op")
            return

        logger.info(f"Upload {upload_id} aborted after {session.bytes_uploaded} bytes")
        record_audit_event(
            self.ledger.db,
            user_id,
            UploadAbortedEvent(
                upload_id=upload_id,
                filename=session.filename,
                bytes_uploaded=session.bytes_uploaded,
            ),
        )
