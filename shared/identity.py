"""
Identity provider - resolves the acting principal from a bearer credential.

The swap engine never sees credentials: callers authenticate upstream with
authenticate() and hand the resulting principal id to the engine, which
trusts it as the authenticated user id.
"""

import logging
import time
from typing import Any
from uuid import UUID, uuid4

from jose import JWTError, jwt

from shared.config import get_settings

logger = logging.getLogger(__name__)

TOKEN_TYPE = "access"


class AuthenticationError(Exception):
    """Raised when a credential cannot be resolved to a principal."""

    pass


def create_access_token(principal_id: UUID) -> str:
    """
    Create a signed access token for a principal.

    Used by seed scripts and tests; token issuance for end users lives with
    the account subsystem.
    """
    settings = get_settings()
    now = int(time.time())
    payload = {
        "sub": str(principal_id),
        "iat": now,
        "exp": now + settings.JWT_EXPIRATION_HOURS * 3600,
        "jti": str(uuid4()),
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry, returning the token claims."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {e}") from e

    if payload.get("type") != TOKEN_TYPE:
        raise AuthenticationError("Invalid token type")
    return payload


def authenticate(credential: str | None) -> UUID:
    """
    Resolve a bearer credential to the authenticated principal id.

    Args:
        credential: Raw token (without the "Bearer " prefix)

    Returns:
        Principal UUID from the token subject

    Raises:
        AuthenticationError: Missing, malformed, expired or mis-signed token
    """
    if not credential:
        raise AuthenticationError("Not authenticated")

    payload = decode_token(credential)
    subject = payload.get("sub")
    try:
        return UUID(str(subject))
    except (TypeError, ValueError) as e:
        logger.warning("Token subject is not a principal id", extra={"error_code": "BAD_SUBJECT"})
        raise AuthenticationError("Token subject is not a valid principal id") from e
