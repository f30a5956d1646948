"""
tickets/rules.py -- Ticket lifecycle rules.

Statuses are OPEN, IN_PROGRESS and CLOSED. The order between them is not
enforced: an admin may move a ticket from any status to any other (or to the
same one). What IS enforced:

  - new tickets always start at OPEN, with a non-empty title and description
  - a status must be one of the three values, matched exactly
  - the owner never changes after creation
  - a USER only ever sees tickets they own; an ADMIN sees all of them

Role requirements on listing everything and changing status are enforced by
the access gate on the routes (auth/dependencies.require_admin); the functions
here assume the caller has already passed it.

All functions take the store as a parameter so any TicketStore-shaped object
(a test double included) can be injected.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from auth.models import TokenClaims
from core.errors import InvalidStatusError, InvalidTicketError, TicketNotFoundError
from tickets.models import Ticket, TicketStatus

if TYPE_CHECKING:
    from tickets.store import TicketStore

logger = logging.getLogger("tickettracker.tickets")

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000

VALID_STATUSES: frozenset[str] = frozenset(s.value for s in TicketStatus)


def parse_status(value: object) -> TicketStatus:
    """Return the TicketStatus for `value`, or raise InvalidStatusError.

    Matching is exact: "open" and " OPEN" are rejected just like "DONE".
    """
    if not isinstance(value, str) or value not in VALID_STATUSES:
        raise InvalidStatusError()
    return TicketStatus(value)


def create_ticket(store: TicketStore, owner_id: str, title: str, description: str) -> Ticket:
    """Open a new ticket owned by owner_id and return the stored record."""
    title = (title or "").strip()
    description = (description or "").strip()
    if not title or not description:
        raise InvalidTicketError()
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidTicketError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidTicketError(f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters")

    ticket_id = store.create_ticket(
        Ticket(title=title, description=description, user_id=owner_id, status=TicketStatus.OPEN.value)
    )
    logger.info("Ticket %s opened by user %s", ticket_id, owner_id)
    created = store.get_ticket(ticket_id)
    if created is None:
        raise RuntimeError(f"ticket {ticket_id} missing after insert")
    return created


def list_all(store: TicketStore) -> list[Ticket]:
    return store.list_tickets()


def list_owned(store: TicketStore, user_id: str) -> list[Ticket]:
    return store.list_by_owner(user_id)


def set_status(store: TicketStore, ticket_id: str, new_status: object) -> Ticket:
    """Move a ticket to new_status and return the updated record.

    The status is validated before the lookup, so an invalid value is
    reported as InvalidStatusError even for an unknown ticket id. Either
    failure leaves the stored ticket untouched.
    """
    status = parse_status(new_status)
    current = store.get_ticket(ticket_id)
    if current is None:
        raise TicketNotFoundError()

    if not store.update_status(ticket_id, status.value):
        raise TicketNotFoundError()
    logger.info("Ticket %s status %s -> %s", ticket_id, current.status, status.value)

    updated = store.get_ticket(ticket_id)
    if updated is None:
        raise TicketNotFoundError()
    return updated


def can_view(ticket: Ticket, claims: TokenClaims) -> bool:
    """ADMIN sees every ticket; anyone else only the tickets they own."""
    return claims.is_admin or ticket.user_id == claims.user_id


def get_visible_ticket(store: TicketStore, ticket_id: str, claims: TokenClaims) -> Ticket:
    """Fetch one ticket on behalf of `claims`.

    A ticket the caller may not view is reported exactly like a missing one,
    so ticket ids belonging to other users cannot be discovered by guessing.
    """
    ticket = store.get_ticket(ticket_id)
    if ticket is None or not can_view(ticket, claims):
        raise TicketNotFoundError()
    return ticket
