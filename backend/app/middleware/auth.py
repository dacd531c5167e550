"""
Access Token Dependencies

Verifies bearer tokens issued by the hosted auth provider and resolves
the caller's portal role.
"""

import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.tables import UserProfile

from .error_handler import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

# Security scheme for FastAPI
security = HTTPBearer(
    description="Access token from the hosted auth provider",
    auto_error=False,
)

UPLOADER_ROLES = frozenset({"admin", "team"})


def decode_access_token(token: str) -> dict:
    """
    Verify an access token and return its claims.

    Args:
        token: Encoded JWT

    Returns:
        dict: Verified claims

    Raises:
        UnauthorizedError: If the token is expired, malformed or lacks a subject
    """
    try:
        claims = jwt.decode(
            token,
            key=settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired access token")
        raise UnauthorizedError("Token expired")
    except InvalidTokenError as e:
        logger.info(f"Rejected invalid access token: {e}")
        raise UnauthorizedError()

    if not claims.get("sub"):
        raise UnauthorizedError("Token missing subject")
    return claims


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """FastAPI dependency returning the verified user id of the caller."""
    if credentials is None:
        raise UnauthorizedError()
    return decode_access_token(credentials.credentials)["sub"]


def get_user_role(db: Session, user_id: str) -> str:
    """Look up the portal role of a user, defaulting to client."""
    profile = db.get(UserProfile, user_id)
    return profile.role if profile else "client"


def require_uploader(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> str:
    """FastAPI dependency admitting only team members and admins."""
    role = get_user_role(db, user_id)
    if role not in UPLOADER_ROLES:
        logger.warning(f"User {user_id} with role {role} attempted to start an upload")
        raise ForbiddenError(details={"role": role})
    return user_id
