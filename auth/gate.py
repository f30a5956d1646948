"""
auth/gate.py -- The access gate: one allow/deny decision per request.

check_access() is a pure function of (token, required role). It keeps no
state and does no I/O beyond decoding the token, so the same decision is
shared by every protected route through auth/dependencies.py and can be
unit-tested without an app.

Decision order:
  1. no token (or blank)          -> Deny(UNAUTHENTICATED)
  2. token fails decode_token()   -> Deny(INVALID_TOKEN)
  3. ADMIN required, role differs -> Deny(FORBIDDEN)
  4. otherwise                    -> Allow(claims)

Layer rule: no imports from api/ or tickets/.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from auth.models import Role, TokenClaims
from auth.tokens import decode_token


class RequiredRole(str, Enum):
    ANY = "ANY"
    ADMIN = "ADMIN"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_TOKEN = "invalid_token"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Allow:
    claims: TokenClaims


@dataclass(frozen=True)
class Deny:
    reason: DenyReason


Decision = Union[Allow, Deny]


def check_access(
    token: Optional[str],
    required_role: RequiredRole = RequiredRole.ANY,
    decode: Callable[[str], Optional[TokenClaims]] = decode_token,
) -> Decision:
    """Decide whether a caller holding `token` may run an operation.

    `decode` defaults to the real JWT verifier; tests can pass a stub.
    """
    if token is None or not token.strip():
        return Deny(DenyReason.UNAUTHENTICATED)

    claims = decode(token)
    if claims is None:
        return Deny(DenyReason.INVALID_TOKEN)

    if required_role is RequiredRole.ADMIN and claims.role != Role.ADMIN.value:
        return Deny(DenyReason.FORBIDDEN)

    return Allow(claims)
