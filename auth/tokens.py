"""
auth/tokens.py -- JWT session tokens, password hashing and the auth cookie.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       userId, email, role, iat and exp. decode_token() verifies signature,
       algorithm and expiry on every call and returns None on any failure --
       the access gate turns that into an InvalidToken denial.

  Passwords: bcrypt directly (no passlib wrapper). Its cost factor makes
       brute-force of low-entropy secrets expensive, and checkpw() compares
       digests in constant time. The _DUMMY_HASH constant lets
       auth/accounts.py equalize timing when an email is unknown.

  SECRET_KEY: sourced from core.config.get_settings(). The Settings class
       validates the key at startup, so a missing key stops the process before
       any token is issued.

Layer rule: no imports from api/ or tickets/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from auth.models import Role, TokenClaims
from core.config import get_settings

logger = logging.getLogger("tickettracker.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

COOKIE_NAME = "token"

# bcrypt only looks at the first 72 bytes of its input; newer releases raise
# on anything longer. The API layer rejects longer passwords up front.
MAX_PASSWORD_BYTES = 72

_ROLES = {r.value for r in Role}

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Never raises: a malformed hash, an over-long password or a non-string
    argument all count as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


# Timing equalization dummy hash. Computed once at module load so the first
# signin attempt is not measurably slower than subsequent ones.
_DUMMY_HASH: str = hash_password("tickettracker_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def issue_token(
    user_id: str,
    email: str,
    role: str,
    now: datetime | None = None,
    expire_seconds: int = 0,
) -> str:
    """Encode a signed JWT carrying the caller's identity.

    Args:
        user_id:        The user's id, stored as the userId claim.
        email:          The user's email address.
        role:           "ADMIN" or "USER".
        now:            Issue time. Defaults to the current UTC time; tests
                        pass a past value to mint already-expired tokens.
        expire_seconds: Lifetime in seconds. 0 (default) uses
                        Settings.token_expire_seconds.
    """
    issued = now or datetime.now(timezone.utc)
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    payload = {
        "userId": user_id,
        "email": email,
        "role": role,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(seconds=duration)).timestamp()),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_token(token: str) -> TokenClaims | None:
    """Decode and verify a JWT. Returns TokenClaims, or None on any failure.

    Verification covers the HS256 signature, the exp claim (must be in the
    future) and the claim shape. Returning None rather than raising keeps the
    access gate simple: every flavour of bad token is the same "invalid".
    """
    try:
        payload = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"require_exp": True, "require_iat": True},
        )
    except JWTError:
        return None

    user_id = payload.get("userId")
    email = payload.get("email")
    role = payload.get("role")
    if not isinstance(user_id, str) or not isinstance(email, str) or role not in _ROLES:
        return None
    return TokenClaims(
        user_id=user_id,
        email=email,
        role=role,
        issued_at=int(payload["iat"]),
        expires_at=int(payload["exp"]),
    )


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str) -> None:
    """Write the session token as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie.
    samesite="strict": never sent on cross-site requests.
    secure: only sent over HTTPS when SECURE_COOKIES is on (the default
        outside DEBUG).
    max_age: matches the JWT expiry so both lapse together.
    """
    response.set_cookie(
        COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="strict",
        secure=_settings.secure_cookies,
        max_age=_settings.token_expire_seconds,
    )


def clear_auth_cookie(response) -> None:
    """Expire the session cookie. The token itself stays valid until exp."""
    response.delete_cookie(
        COOKIE_NAME,
        httponly=True,
        samesite="strict",
        secure=_settings.secure_cookies,
    )
