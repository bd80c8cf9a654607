"""Tests for access token decoding and session checks."""

import time

import pytest

from app.services.session_service import (
    AccessRequirements,
    SessionState,
    can_access,
    decode_access_token,
    has_all_permissions,
    has_all_roles,
    has_any_permission,
    has_any_role,
    has_permission,
    has_role,
    is_admin,
    is_authenticated,
    is_email_verified,
)
from tests.test_utils import make_access_token

NOW = 1_730_000_000


def session(permissions=(), expires_at=NOW + 3600, email_verified=True):
    """Build a session without going through a token."""
    return SessionState(
        subject="user-1",
        expires_at=expires_at,
        issued_at=NOW,
        permissions=frozenset(permissions),
        email="user@example.com",
        email_verified=email_verified,
        session_id="s1",
    )


class TestDecodeAccessToken:
    """Tests for the decode_access_token function."""

    def test_valid_token(self):
        """Test that token claims are carried into the session."""
        token = make_access_token("user-1", permissions=["role:admin", "license:read"])

        state = decode_access_token(token)

        assert state.subject == "user-1"
        assert state.permissions == frozenset({"role:admin", "license:read"})
        assert state.email == "user@example.com"
        assert state.email_verified is True
        assert state.session_id == "test-session"
        assert state.expires_at > time.time()

    def test_expired_token(self):
        """Test that an expired token raises."""
        token = make_access_token("user-1", expires_in=-60)
        with pytest.raises(ValueError, match="Token expired"):
            decode_access_token(token)

    def test_wrong_secret(self):
        """Test that a token signed with another key raises."""
        token = make_access_token("user-1", secret="some-other-secret-of-sufficient-length")
        with pytest.raises(ValueError, match="Invalid token"):
            decode_access_token(token)

    def test_garbage(self):
        """Test that a malformed token raises."""
        with pytest.raises(ValueError, match="Invalid token"):
            decode_access_token("not.a.jwt")

    def test_missing_permissions_claim(self):
        """Test that a token without permissions gives an empty set."""
        token = make_access_token("user-1", permissions=[])
        assert decode_access_token(token).permissions == frozenset()


class TestAuthentication:
    """Tests for authentication predicates."""

    def test_no_session(self):
        """Test that no session is not authenticated."""
        assert is_authenticated(None, now=NOW) is False

    def test_unexpired_session(self):
        """Test that a live session is authenticated."""
        assert is_authenticated(session(), now=NOW) is True

    def test_expired_session(self):
        """Test that an expired session is not authenticated."""
        assert is_authenticated(session(expires_at=NOW - 1), now=NOW) is False

    def test_email_verified(self):
        """Test the email verification predicate."""
        assert is_email_verified(session(), now=NOW) is True
        assert is_email_verified(session(email_verified=False), now=NOW) is False
        assert is_email_verified(None, now=NOW) is False


class TestPermissions:
    """Tests for permission and role predicates."""

    def test_has_permission(self):
        """Test single permission checks."""
        state = session(["license:read"])
        assert has_permission(state, "license:read", now=NOW)
        assert not has_permission(state, "license:write", now=NOW)

    def test_expired_session_has_no_permissions(self):
        """Test that expired sessions hold no permissions."""
        state = session(["license:read"], expires_at=NOW - 1)
        assert not has_permission(state, "license:read", now=NOW)

    def test_any_and_all(self):
        """Test the any and all permission checks."""
        state = session(["a", "b"])
        assert has_any_permission(state, ["b", "c"], now=NOW)
        assert not has_any_permission(state, ["c"], now=NOW)
        assert has_all_permissions(state, ["a", "b"], now=NOW)
        assert not has_all_permissions(state, ["a", "c"], now=NOW)

    def test_roles_are_prefixed_permissions(self):
        """Test that roles are read from role-prefixed permissions."""
        state = session(["role:admin", "role:support"])
        assert has_role(state, "admin", now=NOW)
        assert not has_role(state, "billing", now=NOW)
        assert has_any_role(state, ["billing", "support"], now=NOW)
        assert has_all_roles(state, ["admin", "support"], now=NOW)
        assert not has_all_roles(state, ["admin", "billing"], now=NOW)

    def test_is_admin(self):
        """Test the admin role check."""
        assert is_admin(session(["role:admin"]), now=NOW)
        assert not is_admin(session(["admin"]), now=NOW)
        assert not is_admin(None, now=NOW)


class TestCanAccess:
    """Tests for the can_access function."""

    def test_no_requirements(self):
        """Test that empty requirements always pass."""
        assert can_access(None) is True

    def test_requires_authentication(self):
        """Test that authentication can be required."""
        requirements = AccessRequirements(authenticated=True)
        assert can_access(session(), requirements, now=NOW)
        assert not can_access(None, requirements, now=NOW)

    def test_any_permission_by_default(self):
        """Test that one matching permission is enough by default."""
        requirements = AccessRequirements(permissions=("a", "z"))
        assert can_access(session(["a"]), requirements, now=NOW)

    def test_require_all_permissions(self):
        """Test that every permission can be required."""
        requirements = AccessRequirements(permissions=("a", "z"), require_all=True)
        assert not can_access(session(["a"]), requirements, now=NOW)
        assert can_access(session(["a", "z"]), requirements, now=NOW)

    def test_roles(self):
        """Test role requirements."""
        requirements = AccessRequirements(authenticated=True, roles=("admin",))
        assert can_access(session(["role:admin"]), requirements, now=NOW)
        assert not can_access(session(["role:user"]), requirements, now=NOW)
