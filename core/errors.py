"""
core/errors.py -- Domain error taxonomy for the ticket tracker.

Every expected failure in account and ticket operations is a TrackerError
subclass carrying a machine-readable code, a human message, and the HTTP
status the API layer should answer with. api/main.py registers one exception
handler for the whole family, so route handlers just let these propagate.

Access-gate denials (401/400/403) are not in this family: they are raised as
HTTPException by auth/dependencies.py, the same way FastAPI dependencies
usually reject a request.

Layer rule: core/ is the kernel. No imports from api/, auth/ or tickets/.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for expected, client-attributable failures."""

    code = "tracker_error"
    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class DuplicateUserError(TrackerError):
    code = "user_exists"
    default_message = "User already exists"


class UserNotFoundError(TrackerError):
    code = "user_not_found"
    default_message = "User not found"


class InvalidPasswordError(TrackerError):
    code = "invalid_password"
    default_message = "Invalid password"


class AdminSignupDisabledError(TrackerError):
    code = "admin_signup_disabled"
    status_code = 403
    default_message = "Self-registration as ADMIN is disabled"


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------


class InvalidStatusError(TrackerError):
    code = "invalid_status"
    default_message = "Invalid status"


class InvalidTicketError(TrackerError):
    code = "invalid_ticket"
    default_message = "Title and description are required"


class TicketNotFoundError(TrackerError):
    code = "ticket_not_found"
    default_message = "Ticket not found"
