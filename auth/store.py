"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as tickets/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and account
code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  UNIQUE(email) is the final word on duplicate signups: two concurrent
  requests can both pass the get_by_email() pre-check, but only one insert
  succeeds.

Layer rule: no imports from api/ or tickets/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.config import get_settings

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(10), nullable=False, server_default="USER"),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore()
        store.create_user(User(email="a@example.com", role="USER", hashed_password=hash_password("pw")))
        user = store.get_by_email("a@example.com")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def has_users(self) -> bool:
        """Return True if at least one user record exists."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (result or 0) > 0

    def create_user(self, user: User) -> str:
        """Insert a new user and return its generated id.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        auth/accounts.py translates that into DuplicateUserError.
        """
        user_id = user.id or str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=user_id,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    role=user.role,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        return user_id

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact (already normalized) email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        role=row.role,
        created_at=row.created_at,
    )
