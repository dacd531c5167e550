"""
Database tables for upload sessions, media assets, processing jobs,
leads, user profiles and audit events.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, BigInteger, Column, DateTime, Integer, String, Text

from app.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadStatus:
    """Lifecycle states of an upload session."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABORTED = "aborted"

    TERMINAL = frozenset({COMPLETED, ABORTED})


class UploadSession(Base):
    """Ledger record of one in-flight multipart upload."""

    __tablename__ = "chunked_uploads"

    id = Column(String(36), primary_key=True, default=_new_id)
    storage_upload_id = Column(String(1024), unique=True, nullable=False)
    user_id = Column(String(64), nullable=False, index=True)
    project_id = Column(String(64), nullable=True)

    filename = Column(String(512), nullable=False)
    mime_type = Column(String(255), nullable=False)
    file_type = Column(String(32), nullable=True)
    storage_key = Column(String(1024), nullable=False)

    total_size = Column(BigInteger, nullable=False)
    chunk_size = Column(Integer, nullable=False)
    total_chunks = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=UploadStatus.IN_PROGRESS, index=True)
    uploaded_parts = Column(JSON, nullable=False, default=list)  # [{"partNumber": 1, "etag": "..."}]
    chunks_uploaded = Column(Integer, nullable=False, default=0)
    bytes_uploaded = Column(BigInteger, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_activity_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return (
            f"<UploadSession(id={self.id}, filename={self.filename}, "
            f"status={self.status}, parts={self.chunks_uploaded}/{self.total_chunks})>"
        )


class MediaAsset(Base):
    """Durable record of a finalized object in storage."""

    __tablename__ = "media_assets"

    id = Column(String(36), primary_key=True, default=_new_id)
    uploaded_by = Column(String(64), nullable=False)
    project_id = Column(String(64), nullable=True, index=True)
    filename = Column(String(512), nullable=False)
    storage_key = Column(String(1024), nullable=False)
    mime_type = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    file_type = Column(String(32), nullable=True)
    upload_status = Column(String(20), nullable=False, default="complete")
    storage_class = Column(String(20), nullable=False, default="standard")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ProcessingJob(Base):
    """Deferred work on a media asset, picked up by an external worker."""

    __tablename__ = "processing_jobs"

    id = Column(String(36), primary_key=True, default=_new_id)
    media_asset_id = Column(String(36), nullable=False, index=True)
    job_type = Column(String(32), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    job_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Lead(Base):
    """Contact form submission."""

    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(32), nullable=True)
    service = Column(String(32), nullable=False)
    event_date = Column(String(32), nullable=True)
    message = Column(Text, nullable=True)
    project_slug = Column(String(255), nullable=True)
    source = Column(String(64), nullable=False, default="contact_form")
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    status = Column(String(20), nullable=False, default="new")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class UserProfile(Base):
    """Portal role of an authenticated user."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    role = Column(String(20), nullable=False, default="client")


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=True, index=True)
    action = Column(String(64), nullable=False)
    action_category = Column(String(32), nullable=False)
    entity_type = Column(String(32), nullable=True)
    entity_id = Column(String(36), nullable=True)
    event_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
