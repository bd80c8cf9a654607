"""
Session state derived from access tokens.

Tokens are issued by the auth service as HS256 JWTs carrying ``sub`` (user
UUID), ``permissions``, ``email``, ``email_verified``, ``session_id``,
``exp`` and ``iat``. Roles are permissions of the form ``role:<name>``.

All checks are plain functions over an explicit ``SessionState``; nothing is
cached at module level. ``None`` stands for "no session" and fails every check.
"""

import time
from dataclasses import dataclass, field

import jwt

from app.config import settings

ROLE_PREFIX = "role:"
ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class SessionState:
    subject: str
    expires_at: int
    issued_at: int | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    email: str | None = None
    email_verified: bool = False
    session_id: str | None = None


@dataclass(frozen=True)
class AccessRequirements:
    authenticated: bool = False
    permissions: tuple[str, ...] = ()
    roles: tuple[str, ...] = ()
    require_all: bool = False


def decode_access_token(
    token: str,
    secret: str | None = None,
    algorithms: list[str] | None = None,
) -> SessionState:
    """
    Verify an access token and build the session it represents.

    Raises ValueError with a specific message if the token is unusable.
    """
    try:
        payload = jwt.decode(
            token,
            secret if secret is not None else settings.jwt_secret,
            algorithms=algorithms or [settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise ValueError("Token expired")
    except jwt.InvalidTokenError:
        raise ValueError("Invalid token")

    return SessionState(
        subject=payload["sub"],
        expires_at=int(payload["exp"]),
        issued_at=payload.get("iat"),
        permissions=frozenset(payload.get("permissions") or ()),
        email=payload.get("email"),
        email_verified=bool(payload.get("email_verified", False)),
        session_id=payload.get("session_id"),
    )


def is_authenticated(state: SessionState | None, now: float | None = None) -> bool:
    if state is None:
        return False
    if now is None:
        now = time.time()
    return state.expires_at >= now


def has_permission(state: SessionState | None, permission: str, now: float | None = None) -> bool:
    if not is_authenticated(state, now):
        return False
    return permission in state.permissions


def has_any_permission(
    state: SessionState | None, permissions: list[str] | tuple[str, ...], now: float | None = None
) -> bool:
    if not is_authenticated(state, now):
        return False
    return any(p in state.permissions for p in permissions)


def has_all_permissions(
    state: SessionState | None, permissions: list[str] | tuple[str, ...], now: float | None = None
) -> bool:
    if not is_authenticated(state, now):
        return False
    return all(p in state.permissions for p in permissions)


def _role_permissions(roles):
    return [f"{ROLE_PREFIX}{role}" for role in roles]


def has_role(state: SessionState | None, role: str, now: float | None = None) -> bool:
    return has_permission(state, f"{ROLE_PREFIX}{role}", now)


def has_any_role(state: SessionState | None, roles, now: float | None = None) -> bool:
    return has_any_permission(state, _role_permissions(roles), now)


def has_all_roles(state: SessionState | None, roles, now: float | None = None) -> bool:
    return has_all_permissions(state, _role_permissions(roles), now)


def is_admin(state: SessionState | None, now: float | None = None) -> bool:
    return has_role(state, ADMIN_ROLE, now)


def is_email_verified(state: SessionState | None, now: float | None = None) -> bool:
    return is_authenticated(state, now) and state.email_verified


def can_access(
    state: SessionState | None,
    requirements: AccessRequirements | None = None,
    now: float | None = None,
) -> bool:
    """Route guard: check every requirement that is set."""
    if requirements is None:
        return True

    if requirements.authenticated and not is_authenticated(state, now):
        return False

    if requirements.permissions:
        check = has_all_permissions if requirements.require_all else has_any_permission
        if not check(state, requirements.permissions, now):
            return False

    if requirements.roles:
        check = has_all_roles if requirements.require_all else has_any_role
        if not check(state, requirements.roles, now):
            return False

    return True
