"""
Lead intake endpoints.

Public contact form submission with per-IP rate limiting, validation
and a honeypot spam trap.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.error_handler import ValidationFailedError
from app.models import LeadRequest, LeadResponse, RateLimitStatusResponse
from app.services.lead_intake import create_lead, validate_lead_data
from app.services.rate_limiter import (
    RateLimitDecision,
    check_lead_rate_limit,
    get_client_ip,
    lead_rate_limiter,
)

logger = logging.getLogger(__name__)

router = APIRouter()

HONEYPOT_MESSAGE = "Thank you for your inquiry. We'll be in touch soon!"
SUCCESS_MESSAGE = (
    "Thank you for your inquiry! We'll contact you within 2 hours during business hours."
)


def _rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(int(decision.reset_at)),
    }


@router.post(
    "/leads",
    response_model=LeadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Contact Form",
    description="""
Submit a contact form inquiry.

**Constraints:**
- **Rate Limit:** 5 submissions per hour per IP
- **Services:** sports, wedding, product, real-estate, portrait, corporate, other
- **Message:** max 2000 characters
""",
    responses={
        200: {"description": "Submission accepted without being stored"},
        201: {"description": "Lead stored"},
        400: {"description": "Validation failed"},
        429: {"description": "Rate limit exceeded"},
    },
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": LeadRequest.model_json_schema(by_alias=True)}
            }
        }
    },
)
async def submit_lead(
    request: Request,
    response: Response,
    payload: Dict[str, Any] = Body(...),
    decision: RateLimitDecision = Depends(check_lead_rate_limit),
    db: Session = Depends(get_db),
):
    client_ip = get_client_ip(request)

    # Checked on the raw body so a trap hit never reaches schema validation;
    # the reply matches a stored lead and nothing is persisted
    if payload.get("honeypot"):
        logger.info(f"Honeypot triggered for {client_ip}, discarding submission")
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"success": True, "message": HONEYPOT_MESSAGE},
        )

    try:
        lead = LeadRequest.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    errors = validate_lead_data(lead)
    if errors:
        logger.info(f"Lead from {client_ip} rejected: {errors}")
        raise ValidationFailedError(errors)

    stored = create_lead(
        db,
        lead,
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
    )

    for name, value in _rate_limit_headers(decision).items():
        response.headers[name] = value
    return LeadResponse(message=SUCCESS_MESSAGE, lead_id=stored.id)


@router.get(
    "/leads",
    response_model=RateLimitStatusResponse,
    summary="Contact Form Rate Limit Status",
    description="Remaining submissions for the caller's IP in the current window.",
)
async def lead_rate_limit_status(request: Request) -> RateLimitStatusResponse:
    decision = lead_rate_limiter.peek(get_client_ip(request))
    return RateLimitStatusResponse(
        remaining=decision.remaining,
        limit=decision.limit,
        reset_at=decision.reset_at or None,
    )
