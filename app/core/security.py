"""Verification of identity-provider access tokens."""

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Verified identity issued by the identity provider."""

    id: UUID
    email: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and verify an access token. Returns claims or None if invalid."""
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError as exc:
        logger.debug("Access token rejected: %s", exc.__class__.__name__)
        return None


def identity_from_claims(claims: dict[str, Any]) -> Identity | None:
    """Build an Identity from verified token claims."""
    sub = claims.get("sub")
    if not sub:
        return None
    try:
        user_id = UUID(str(sub))
    except ValueError:
        return None
    return Identity(
        id=user_id,
        email=str(claims.get("email") or ""),
        metadata=dict(claims.get("user_metadata") or {}),
    )
