"""
API request and response models for the ticket tracker REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
tickets/models.py, which own the internal domain representation. Route
handlers map between the two.

Response models serialize with camelCase aliases (userId, createdAt) because
that is what the browser client reads; Python code constructs them with
snake_case field names.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.models import Role, TokenClaims, User
from auth.tokens import MAX_PASSWORD_BYTES
from tickets.models import Ticket

# Deliberately loose: one "@" with something on both sides. Deliverability
# is not the server's problem.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error body returned on 4xx/5xx responses.

    error carries the human-readable message because the browser client
    displays it as-is; code is the stable machine-readable identifier.
    """

    model_config = ConfigDict(frozen=True)

    error: str
    code: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class _Credentials(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    # Not stripped: whitespace is a legitimate part of a password.
    password: str = Field(min_length=1, json_schema_extra={"format": "password"})

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        """bcrypt hashes at most 72 bytes; refuse rather than silently truncate."""
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class SignupRequest(_Credentials):
    """Request body for POST /signup. role defaults to USER."""

    role: Role = Role.USER


class SigninRequest(_Credentials):
    """Request body for POST /signin."""


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a User. The password hash never leaves the server."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    role: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id or "", email=user.email, role=user.role, created_at=user.created_at or "")


class AuthResponse(BaseModel):
    """Response body for POST /signup and POST /signin."""

    model_config = ConfigDict(frozen=True)

    message: str
    user: UserResponse


class SessionUser(BaseModel):
    """The decoded session claims, as reported by GET /auth-status."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    user_id: str
    email: str
    role: str
    iat: int
    exp: int

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "SessionUser":
        return cls(
            user_id=claims.user_id,
            email=claims.email,
            role=claims.role,
            iat=claims.issued_at,
            exp=claims.expires_at,
        )


class AuthStatusResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    authenticated: bool
    user: Optional[SessionUser] = None


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------


class TicketCreate(BaseModel):
    """Request body for POST /tickets.

    Emptiness and length are checked by tickets.rules.create_ticket so that
    every caller gets the same InvalidTicket error, not a 422.
    """

    title: str = ""
    description: str = ""


class TicketStatusUpdate(BaseModel):
    """Request body for PATCH /tickets/{id}/status.

    status is left untyped on purpose: any unknown value, a number or null
    included, must surface as the domain's invalid_status error (400), not
    as a schema validation 422.
    """

    status: Any = None


class TicketResponse(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str
    status: str
    user_id: str
    created_at: str
    updated_at: str

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "TicketResponse":
        """Build a TicketResponse from a domain Ticket."""
        return cls(
            id=ticket.id or "",
            title=ticket.title,
            description=ticket.description,
            status=ticket.status,
            user_id=ticket.user_id,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )


class TicketStatusResponse(BaseModel):
    """Response body for PATCH /tickets/{id}/status."""

    model_config = ConfigDict(frozen=True)

    message: str
    ticket: TicketResponse
