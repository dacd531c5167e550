"""
Processing job enqueueing for finalized media assets.

This service only inserts pending jobs; an external worker executes them.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.tables import MediaAsset, ProcessingJob

logger = logging.getLogger(__name__)


def job_type_for(mime_type: str) -> Optional[str]:
    """Return the processing job type for a MIME type, or None if none applies."""
    if mime_type.startswith("video/"):
        return "transcode"
    if mime_type.startswith("image/"):
        return "thumbnail"
    return None


def enqueue_processing_job(db: Session, asset: MediaAsset) -> Optional[ProcessingJob]:
    """
    Insert a pending processing job for a media asset when its type needs one.

    Args:
        db: Database session
        asset: Finalized media asset

    Returns:
        ProcessingJob: The pending job, or None for types with no processing

    Raises:
        SQLAlchemyError: If the insert fails
    """
    job_type = job_type_for(asset.mime_type)
    if job_type is None:
        return None

    job = ProcessingJob(
        media_asset_id=asset.id,
        job_type=job_type,
        status="pending",
        job_metadata={
            "original_path": asset.storage_key,
            "mime_type": asset.mime_type,
        },
    )
    db.add(job)
    db.commit()
    logger.info(f"Queued {job_type} job {job.id} for asset {asset.id}")
    return job
