"""
Lead Intake Service

Validates contact form submissions and stores them as leads.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.lead import LeadRequest
from app.tables import Lead

from .audit_log import LeadSubmittedEvent, record_audit_event

logger = logging.getLogger(__name__)

VALID_SERVICES = (
    "sports",
    "wedding",
    "product",
    "real-estate",
    "portrait",
    "corporate",
    "other",
)

MAX_MESSAGE_LENGTH = 2000

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]{7,20}$")


def validate_lead_data(data: LeadRequest) -> List[str]:
    """
    Check a submission and collect every problem found.

    Returns:
        list[str]: Human-readable errors, empty when the lead is valid
    """
    errors: List[str] = []

    if not data.name or len(data.name.strip()) < 2:
        errors.append("Name is required (min 2 characters)")

    if not data.email or not EMAIL_PATTERN.match(data.email.strip()):
        errors.append("Valid email address is required")

    if not data.service:
        errors.append("Service type is required")
    elif data.service not in VALID_SERVICES:
        errors.append("Invalid service type")

    if data.phone and not PHONE_PATTERN.match(data.phone):
        errors.append("Invalid phone number format")

    if data.message and len(data.message) > MAX_MESSAGE_LENGTH:
        errors.append(f"Message too long (max {MAX_MESSAGE_LENGTH} characters)")

    return errors


def create_lead(
    db: Session,
    data: LeadRequest,
    ip_address: str,
    user_agent: Optional[str] = None,
) -> Lead:
    """
    Persist a validated submission.

    Args:
        db: Database session
        data: Submission that passed validate_lead_data
        ip_address: Originating client address
        user_agent: Client User-Agent header

    Returns:
        Lead: Stored lead with status "new"
    """
    lead = Lead(
        name=data.name.strip(),
        email=data.email.lower().strip(),
        phone=(data.phone or "").strip() or None,
        service=data.service,
        event_date=data.event_date or None,
        message=(data.message or "").strip() or None,
        project_slug=data.project_slug or None,
        source=data.source or "contact_form",
        ip_address=ip_address,
        user_agent=user_agent,
        status="new",
    )
    db.add(lead)
    db.commit()
    logger.info(f"Stored lead {lead.id} for service {lead.service} from {ip_address}")

    record_audit_event(
        db,
        None,
        LeadSubmittedEvent(lead_id=lead.id, service=lead.service, source=lead.source),
    )
    return lead
