"""Read claims from the session token.

The backend verifies the signature; the client only needs to know who the
token belongs to and whether it has expired, so nothing here verifies it.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import jwt

from litbuddy_chat.application.dto.principal import Principal

logger = logging.getLogger(__name__)


def read_claims(token: str) -> dict[str, Any] | None:
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        logger.debug("Token is not a readable JWT", exc_info=True)
        return None


def token_expired(token: str, now: datetime | None = None) -> bool:
    """True only when the token carries an ``exp`` claim in the past."""
    claims = read_claims(token)
    if not claims or claims.get("exp") is None:
        return False
    now = now or datetime.now(timezone.utc)
    return float(claims["exp"]) <= now.timestamp()


def principal_from_token(token: str, display_name: str | None = None) -> Principal:
    claims = read_claims(token)
    if not claims:
        raise ValueError("Token carries no readable claims")
    user_id = claims.get("id") or claims.get("_id") or claims.get("sub")
    if not user_id:
        raise ValueError("Token carries no user id")
    return Principal(
        user_id=str(user_id),
        display_name=display_name or claims.get("displayName") or claims.get("name"),
    )
