"""
auth/dependencies.py -- FastAPI Depends() helpers around the access gate.

Token sources, in priority order:
  1. "token" cookie -- set by /signup and /signin for the browser client.
  2. Authorization: Bearer <token> header -- scripts and API clients.

require_user() allows any signed-in role; require_admin() demands ADMIN.
Both return the verified TokenClaims so handlers never decode tokens
themselves. Denials map onto HTTP as:
  UNAUTHENTICATED -> 401, INVALID_TOKEN -> 400, FORBIDDEN -> 403

Layer rule: no imports from tickets/. This module may import from fastapi
because it is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.gate import Allow, DenyReason, RequiredRole, check_access
from auth.models import TokenClaims
from auth.tokens import COOKIE_NAME

_DENIALS: dict[DenyReason, tuple[int, str]] = {
    DenyReason.UNAUTHENTICATED: (401, "Access Denied"),
    DenyReason.INVALID_TOKEN: (400, "Invalid Token"),
    DenyReason.FORBIDDEN: (403, "Access Denied: Admins only"),
}


def read_token(request: Request) -> str | None:
    """Return the raw session token from the cookie or Bearer header, if any."""
    token: str | None = request.cookies.get(COOKIE_NAME)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
    return token


def _enforce(request: Request, required_role: RequiredRole) -> TokenClaims:
    decision = check_access(read_token(request), required_role)
    if isinstance(decision, Allow):
        return decision.claims
    status_code, message = _DENIALS[decision.reason]
    raise HTTPException(
        status_code=status_code,
        detail={"code": decision.reason.value, "message": message},
    )


def require_user(request: Request) -> TokenClaims:
    """Require any signed-in caller (USER or ADMIN).

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: TokenClaims = Depends(require_user)): ...
    """
    return _enforce(request, RequiredRole.ANY)


def require_admin(request: Request) -> TokenClaims:
    """Require an ADMIN caller. 401/400 when unauthenticated, 403 when not admin."""
    return _enforce(request, RequiredRole.ADMIN)
