"""
Audit Log Service

Typed audit events and a best-effort writer. A failed audit write never
fails the request that produced it.
"""

import logging
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.tables import AuditEvent

logger = logging.getLogger(__name__)


class UploadStartedEvent(BaseModel):
    action: Literal["upload_started"] = "upload_started"
    upload_id: str
    filename: str
    total_size: int
    total_chunks: int
    file_type: str


class UploadCompletedEvent(BaseModel):
    action: Literal["upload_completed"] = "upload_completed"
    upload_id: str
    asset_id: str
    filename: str
    total_size: int
    total_parts: int
    storage_key: str


class UploadAbortedEvent(BaseModel):
    action: Literal["upload_aborted"] = "upload_aborted"
    upload_id: str
    filename: str
    bytes_uploaded: int


class LeadSubmittedEvent(BaseModel):
    action: Literal["lead_submitted"] = "lead_submitted"
    lead_id: str
    service: str
    source: str


AuditPayload = Annotated[
    Union[UploadStartedEvent, UploadCompletedEvent, UploadAbortedEvent, LeadSubmittedEvent],
    Field(discriminator="action"),
]

# action -> (category, entity type, payload field holding the entity id)
_EVENT_ENTITIES = {
    "upload_started": ("media", "chunked_upload", "upload_id"),
    "upload_completed": ("media", "media_asset", "asset_id"),
    "upload_aborted": ("media", "chunked_upload", "upload_id"),
    "lead_submitted": ("leads", "lead", "lead_id"),
}


def record_audit_event(
    db: Session, user_id: Optional[str], payload: AuditPayload
) -> Optional[AuditEvent]:
    """
    Persist an audit event, logging and discarding any database failure.

    Args:
        db: Database session (rolled back on failure)
        user_id: Acting user, None for anonymous actions
        payload: One of the typed audit events

    Returns:
        AuditEvent: The stored row, or None if the write failed
    """
    category, entity_type, id_field = _EVENT_ENTITIES[payload.action]
    event = AuditEvent(
        user_id=user_id,
        action=payload.action,
        action_category=category,
        entity_type=entity_type,
        entity_id=getattr(payload, id_field),
        event_metadata=payload.model_dump(exclude={"action"}),
    )
    try:
        db.add(event)
        db.commit()
        return event
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record audit event {payload.action}: {e}")
        return None
