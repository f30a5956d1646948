"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors
tickets/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/ or tickets/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


@dataclass
class User:
    """A registered account.

    email is the login key and is stored normalized (stripped, lower-case).
    Users are immutable after signup: there is no profile edit path, so the
    store exposes no update method.

    id is None before the record is written to the database.
    """

    email: str
    role: str  # "ADMIN" | "USER"
    hashed_password: str
    id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified session token.

    Never persisted. issued_at / expires_at are Unix timestamps (seconds),
    exactly as they appear in the JWT iat / exp claims.
    """

    user_id: str
    email: str
    role: str
    issued_at: int
    expires_at: int

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value
