"""Unit tests for auth/tokens.py -- password hashing and the session token codec.

Covers:
- hash_password() salts (two hashes of one password differ)
- verify_password() accepts the right password, rejects others, never raises
- issue_token() / decode_token() round-trip
- decode_token() rejects expired, foreign-key, tampered, unsigned and
  malformed tokens, and tokens with missing or unknown claims
"""

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.tokens import decode_token, hash_password, issue_token, verify_password
from core.config import get_settings


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


def _now_ts() -> int:
    return int(datetime.now(timezone.utc).timestamp())


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


class TestPasswordHashing:
    """bcrypt hashing via hash_password() / verify_password()."""

    def test_verify_accepts_original_password(self):
        """The password a hash was made from must verify."""
        assert verify_password("hunter2", hash_password("hunter2")) is True

    @pytest.mark.parametrize("other", ["hunter3", "Hunter2", "hunter2 ", ""])
    def test_verify_rejects_other_passwords(self, other):
        """Near-misses, case changes and trailing spaces must not verify."""
        assert verify_password(other, hash_password("hunter2")) is False

    def test_hash_is_salted(self):
        """Two hashes of one password differ and both verify."""
        first = hash_password("same-input")
        second = hash_password("same-input")
        assert first != second
        assert verify_password("same-input", first)
        assert verify_password("same-input", second)

    def test_hash_is_not_plaintext(self):
        """The digest must not contain the password."""
        assert "hunter2" not in hash_password("hunter2")

    @pytest.mark.parametrize("digest", ["", "not-a-bcrypt-hash", "$2b$12$short"])
    def test_verify_returns_false_on_malformed_digest(self, digest):
        """A corrupt stored hash is a failed check, not an exception."""
        assert verify_password("hunter2", digest) is False

    def test_verify_returns_false_on_non_string_digest(self):
        """A missing stored hash is a failed check, not an exception."""
        assert verify_password("hunter2", None) is False

    def test_unicode_password_round_trip(self):
        """Non-ASCII passwords hash and verify."""
        assert verify_password("pässwörd-🔑", hash_password("pässwörd-🔑"))


# ---------------------------------------------------------------------------
# Token codec
# ---------------------------------------------------------------------------


class TestTokenRoundTrip:
    """issue_token() output decodes back to the same claims."""

    def test_decode_returns_issued_claims(self):
        """userId, email and role survive the round trip."""
        token = issue_token("user-1", "a@example.com", "USER")
        claims = decode_token(token)
        assert claims is not None
        assert claims.user_id == "user-1"
        assert claims.email == "a@example.com"
        assert claims.role == "USER"

    def test_expiry_is_one_hour_after_issue(self):
        """exp - iat must equal TOKEN_EXPIRE_SECONDS."""
        claims = decode_token(issue_token("user-1", "a@example.com", "ADMIN"))
        assert claims is not None
        assert claims.expires_at - claims.issued_at == get_settings().token_expire_seconds == 3600

    def test_admin_claims_flag(self):
        """ADMIN claims report is_admin."""
        claims = decode_token(issue_token("user-2", "b@example.com", "ADMIN"))
        assert claims is not None and claims.is_admin

    def test_payload_uses_client_claim_names(self):
        """The payload keys are exactly the ones the browser client reads."""
        token = issue_token("user-1", "a@example.com", "USER")
        payload = jwt.get_unverified_claims(token)
        assert set(payload) == {"userId", "email", "role", "iat", "exp"}


class TestTokenRejection:
    """decode_token() returns None for every token it cannot trust."""

    def test_expired_token_is_rejected(self):
        """A token past exp must not decode."""
        two_hours_ago = datetime.now(timezone.utc) - timedelta(hours=2)
        token = issue_token("user-1", "a@example.com", "USER", now=two_hours_ago)
        assert decode_token(token) is None

    def test_token_signed_with_another_key_is_rejected(self):
        """A signature from a different secret must not decode."""
        now = _now_ts()
        payload = {"userId": "u", "email": "e@example.com", "role": "ADMIN", "iat": now, "exp": now + 600}
        forged = jwt.encode(payload, "x" * 64, algorithm="HS256")
        assert decode_token(forged) is None

    def test_tampered_payload_is_rejected(self):
        """Editing the payload invalidates the signature."""
        token = issue_token("user-1", "a@example.com", "USER")
        header, payload, signature = token.split(".")
        claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
        claims["role"] = "ADMIN"
        tampered = ".".join([header, _b64(claims), signature])
        assert decode_token(tampered) is None

    def test_unsigned_token_is_rejected(self):
        """alg=none tokens must be refused."""
        now = _now_ts()
        header = _b64({"alg": "none", "typ": "JWT"})
        payload = _b64({"userId": "u", "email": "e@example.com", "role": "ADMIN", "iat": now, "exp": now + 600})
        assert decode_token(f"{header}.{payload}.") is None

    @pytest.mark.parametrize("garbage", ["", "garbage", "a.b.c", "....", "null"])
    def test_malformed_token_is_rejected(self, garbage):
        """Strings that are not JWTs must not decode."""
        assert decode_token(garbage) is None

    def test_missing_claims_are_rejected(self):
        """A token without email or role must not decode."""
        now = _now_ts()
        token = jwt.encode({"userId": "u", "iat": now, "exp": now + 600}, get_settings().secret_key, algorithm="HS256")
        assert decode_token(token) is None

    def test_missing_expiry_is_rejected(self):
        """A token without exp must not decode."""
        payload = {"userId": "u", "email": "e@example.com", "role": "USER", "iat": _now_ts()}
        token = jwt.encode(payload, get_settings().secret_key, algorithm="HS256")
        assert decode_token(token) is None

    def test_unknown_role_is_rejected(self):
        """A role outside USER/ADMIN must not decode."""
        now = _now_ts()
        payload = {"userId": "u", "email": "e@example.com", "role": "ROOT", "iat": now, "exp": now + 600}
        token = jwt.encode(payload, get_settings().secret_key, algorithm="HS256")
        assert decode_token(token) is None
