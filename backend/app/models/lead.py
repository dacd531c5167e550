"""Pydantic models for the contact form endpoint."""

from typing import Optional

from pydantic import BaseModel, Field


class LeadRequest(BaseModel):
    """
    Request body for POST /api/leads.

    Every field is optional so validation can report all problems at once.
    The honeypot is read from the raw body before this model is built.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    event_date: Optional[str] = Field(None, alias="eventDate")
    message: Optional[str] = None
    project_slug: Optional[str] = Field(None, alias="projectSlug")
    source: Optional[str] = None
    honeypot: Optional[str] = Field(None, description="Spam trap, must stay empty")

    model_config = {"populate_by_name": True}


class LeadResponse(BaseModel):
    success: bool = True
    message: str
    lead_id: Optional[str] = Field(None, alias="leadId")

    model_config = {"populate_by_name": True}


class RateLimitStatusResponse(BaseModel):
    """Response body for GET /api/leads."""

    remaining: int
    limit: int
    reset_at: Optional[float] = Field(
        None,
        alias="resetAt",
        description="Epoch seconds when the current window ends, null if none is open",
    )

    model_config = {"populate_by_name": True}
