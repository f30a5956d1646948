"""
tickets/models.py -- Domain dataclasses for support tickets.

Pure data containers with zero logic. Status rules live in tickets/rules.py;
SQL lives in tickets/store.py.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


@dataclass
class Ticket:
    """A support request raised by a user.

    user_id is the owner and is fixed at creation -- the store has no way to
    change it. Tickets are never deleted.

    id is None before the record is written to the database.
    """

    title: str
    description: str
    user_id: str
    status: str = TicketStatus.OPEN.value
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, bumped on every status change
