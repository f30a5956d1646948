"""
api/routes/auth.py -- Account and session REST endpoints.

Routes:
  POST /signup       -- create account; sets token cookie; 201
  POST /signin       -- password signin; sets token cookie; 200
  POST /logout       -- clears the cookie; 200
  GET  /auth-status  -- reports the decoded session, never errors

All four are public: they are how a caller obtains, inspects or drops a
session in the first place.

Security:
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Cache-Control: no-store on responses that carry a fresh token cookie.
  Logout only expires the cookie. There is no server-side revocation, so a
  copied token keeps working until its exp claim passes.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import (
    AuthResponse,
    AuthStatusResponse,
    MessageResponse,
    SessionUser,
    SigninRequest,
    SignupRequest,
    UserResponse,
)
from auth.accounts import authenticate_user, register_user
from auth.dependencies import read_token
from auth.store import UserStore
from auth.tokens import clear_auth_cookie, decode_token, issue_token, set_auth_cookie
from core.config import get_settings

router = APIRouter()


def _session_response(status_code: int, message: str, user) -> JSONResponse:
    token = issue_token(user.id, user.email, user.role)
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(message=message, user=UserResponse.from_user(user)).model_dump(by_alias=True),
    )
    set_auth_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Register a new account and start a session for it.

    role is taken from the body (default USER). Requesting ADMIN is refused
    with 403 when ALLOW_ADMIN_SIGNUP is off.
    """
    user_store: UserStore = request.app.state.user_store
    user = register_user(
        user_store,
        body.email,
        body.password,
        role=body.role,
        allow_admin=get_settings().allow_admin_signup,
    )
    return _session_response(201, "User registered successfully", user)


@router.post("/signin", response_model=AuthResponse)
def signin(request: Request, body: SigninRequest) -> JSONResponse:
    """Authenticate with email and password; set the token cookie."""
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)
    return _session_response(200, "Login successful", user)


@router.post("/logout", response_model=MessageResponse)
def logout() -> JSONResponse:
    """Clear the token cookie."""
    resp = JSONResponse(content=MessageResponse(message="Logged out successfully").model_dump())
    clear_auth_cookie(resp)
    return resp


@router.get("/auth-status", response_model=AuthStatusResponse, response_model_exclude_none=True)
def auth_status(request: Request) -> AuthStatusResponse:
    """Report whether the caller holds a valid session.

    Any problem with the token -- missing, malformed, badly signed, expired --
    is reported as authenticated=false rather than an error status.
    """
    token = read_token(request)
    claims = decode_token(token) if token else None
    if claims is None:
        return AuthStatusResponse(authenticated=False)
    return AuthStatusResponse(authenticated=True, user=SessionUser.from_claims(claims))
