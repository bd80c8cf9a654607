"""Shared test utilities."""

import time
from datetime import UTC, datetime

import jwt

from app.config import settings


def utcnow():
    """Get current UTC time as naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def make_access_token(
    user_uuid: str,
    permissions: list[str] | None = None,
    expires_in: int = 3600,
    email_verified: bool = True,
    secret: str | None = None,
) -> str:
    """Mint an access token the way the auth service does."""
    now = int(time.time())
    payload = {
        "sub": user_uuid,
        "permissions": permissions or [],
        "session_id": "test-session",
        "email": "user@example.com",
        "email_verified": email_verified,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)
