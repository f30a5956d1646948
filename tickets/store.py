"""
tickets/store.py -- SQLAlchemy Core persistence layer for tickets.

Pattern: Repository + Data Mapper (same as auth/store.py).
TicketStore is the repository; _row_to_ticket is the mapper.

The store does not validate status values or ownership; tickets/rules.py does
that before calling in. Concurrent status updates to one ticket are
last-write-wins.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from core.config import get_settings
from tickets.models import Ticket, TicketStatus

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_tickets = Table(
    "tickets",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("title", String(200), nullable=False),
    Column("description", Text, nullable=False),
    Column("status", String(20), nullable=False, server_default=TicketStatus.OPEN.value),
    # No foreign key: users live in auth/store.py and may sit in another DB.
    Column("user_id", String(36), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TicketStore:
    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # SQLite requires check_same_thread=False when used from FastAPI's
            # thread pool, where one connection may be reused across threads.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def create_ticket(self, ticket: Ticket) -> str:
        """Insert a new ticket and return its generated id."""
        ticket_id = ticket.id or str(uuid.uuid4())
        now = _now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                _tickets.insert().values(
                    id=ticket_id,
                    title=ticket.title,
                    description=ticket.description,
                    status=ticket.status,
                    user_id=ticket.user_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        return ticket_id

    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        with self.engine.connect() as conn:
            row = conn.execute(_tickets.select().where(_tickets.c.id == ticket_id)).fetchone()
        return _row_to_ticket(row) if row is not None else None

    def list_tickets(self) -> list[Ticket]:
        """Return every ticket, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_tickets.select().order_by(_tickets.c.created_at, _tickets.c.id)).fetchall()
        return [_row_to_ticket(r) for r in rows]

    def list_by_owner(self, user_id: str) -> list[Ticket]:
        """Return the tickets owned by user_id, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _tickets.select()
                .where(_tickets.c.user_id == user_id)
                .order_by(_tickets.c.created_at, _tickets.c.id)
            ).fetchall()
        return [_row_to_ticket(r) for r in rows]

    def update_status(self, ticket_id: str, status: str) -> bool:
        """Set a ticket's status. Returns True if a row was updated, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _tickets.update().where(_tickets.c.id == ticket_id).values(status=status, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_ticket(row) -> Ticket:
    return Ticket(
        id=row.id,
        title=row.title,
        description=row.description,
        status=row.status,
        user_id=row.user_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
