"""Bearer token handling.

Tokens are issued by the identity provider in front of this service; here they
are only decoded into an :class:`~app.core.permissions.Actor`.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import get_settings
from app.core.enums import RoleEnum
from app.core.permissions import Actor

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=True)


def create_access_token(subject: str, expires_minutes: int = 30, **claims: Any) -> str:
    """Create signed JWT access token (used by tooling and tests)."""
    payload: dict[str, Any] = {
        "sub": subject,
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(minutes=expires_minutes),
    }
    payload.update({key: str(value) for key, value in claims.items() if value is not None})
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate JWT token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc


def _optional_uuid(value: Any) -> UUID | None:
    if value in (None, ""):
        return None
    return UUID(str(value))


def actor_from_claims(payload: dict[str, Any]) -> Actor:
    """Map token claims to an actor, rejecting unknown roles."""
    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid access token")
    try:
        return Actor(
            id=UUID(str(payload["sub"])),
            role=RoleEnum(str(payload["role"]).lower()),
            client_id=_optional_uuid(payload.get("client_id")),
            photographer_id=_optional_uuid(payload.get("photographer_id")),
        )
    except (KeyError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token claims are incomplete",
        ) from exc


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Actor:
    """Resolve current actor from bearer token."""
    return actor_from_claims(decode_token(credentials.credentials))
