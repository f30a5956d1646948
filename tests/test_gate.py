"""Unit tests for auth/gate.py -- the allow/deny decision.

The gate is pure, so most tests use real tokens from issue_token(); a few
inject a stub decoder to pin down the decision order independently of JWT.
"""

from datetime import datetime, timedelta, timezone

import pytest

from auth.gate import Allow, Deny, DenyReason, RequiredRole, check_access
from auth.models import TokenClaims
from auth.tokens import issue_token


def _token(role: str) -> str:
    return issue_token("user-1", "a@example.com", role)


class TestMissingToken:
    """An absent or blank token is always UNAUTHENTICATED."""

    @pytest.mark.parametrize("token", [None, "", "   "])
    @pytest.mark.parametrize("required", [RequiredRole.ANY, RequiredRole.ADMIN])
    def test_no_token_is_unauthenticated(self, token, required):
        """None, "" and whitespace deny with UNAUTHENTICATED for every requirement."""
        assert check_access(token, required) == Deny(DenyReason.UNAUTHENTICATED)


class TestInvalidToken:
    """A token that does not decode is INVALID_TOKEN."""

    def test_garbage_is_invalid(self):
        """A non-JWT string is INVALID_TOKEN."""
        assert check_access("not-a-jwt", RequiredRole.ANY) == Deny(DenyReason.INVALID_TOKEN)

    def test_expired_token_is_invalid(self):
        """An expired admin token is INVALID_TOKEN, not allowed."""
        token = issue_token("user-1", "a@example.com", "ADMIN", now=datetime.now(timezone.utc) - timedelta(days=1))
        assert check_access(token, RequiredRole.ADMIN) == Deny(DenyReason.INVALID_TOKEN)

    def test_invalid_token_wins_over_role_check(self):
        """Verification runs before the role check."""
        # An undecodable token has no role, so it can never be "forbidden".
        assert check_access("x.y.z", RequiredRole.ADMIN) == Deny(DenyReason.INVALID_TOKEN)


class TestRoles:
    """Role requirements on verified claims."""

    def test_admin_required_denies_user(self):
        """USER claims on an ADMIN requirement are FORBIDDEN."""
        assert check_access(_token("USER"), RequiredRole.ADMIN) == Deny(DenyReason.FORBIDDEN)

    def test_admin_required_allows_admin(self):
        """ADMIN claims on an ADMIN requirement are allowed."""
        decision = check_access(_token("ADMIN"), RequiredRole.ADMIN)
        assert isinstance(decision, Allow)
        assert decision.claims.role == "ADMIN"

    @pytest.mark.parametrize("role", ["USER", "ADMIN"])
    def test_any_allows_every_role(self, role):
        """Every known role passes an ANY requirement."""
        decision = check_access(_token(role), RequiredRole.ANY)
        assert isinstance(decision, Allow)
        assert decision.claims.user_id == "user-1"
        assert decision.claims.email == "a@example.com"

    def test_default_requirement_is_any(self):
        """check_access() without a requirement behaves as ANY."""
        assert isinstance(check_access(_token("USER")), Allow)


class TestInjectedDecoder:
    """The decoder is injectable, so the decision order can be pinned without JWT."""

    def test_claims_are_forwarded_unchanged(self):
        """Allow carries the decoder's claims object as-is."""
        claims = TokenClaims(user_id="u9", email="z@example.com", role="ADMIN", issued_at=1, expires_at=2)
        decision = check_access("opaque", RequiredRole.ADMIN, decode=lambda _t: claims)
        assert decision == Allow(claims)

    def test_decoder_returning_none_is_invalid(self):
        """A decoder returning None yields INVALID_TOKEN."""
        assert check_access("opaque", RequiredRole.ANY, decode=lambda _t: None) == Deny(DenyReason.INVALID_TOKEN)

    def test_decoder_not_called_without_token(self):
        """No token means the decoder is never consulted."""
        calls = []
        check_access(None, RequiredRole.ANY, decode=lambda t: calls.append(t))
        assert calls == []
