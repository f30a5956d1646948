"""
tests/conftest.py -- Shared test fixtures for the ticket tracker.

This module provides:
  - _make_test_stores(): isolated in-memory DBs for users + tickets
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - stores / client / unsafe_client fixtures
  - signup fixture: registers an account and hands back its session token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

The DEBUG env var must be set before any project import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError. DEBUG
also turns Secure cookies off, so TestClient (plain http) sends them back.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore
from tickets.store import TicketStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, TicketStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so tests never share
                   state.
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    tickets_url = f"sqlite:///file:test_tickets_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=users_url), TicketStore(db_url=tickets_url)


def _patch_lifespan(user_store: UserStore, ticket_store: TicketStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.ticket_store = ticket_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stores() -> Generator[tuple[UserStore, TicketStore], None, None]:
    user_store, ticket_store = _make_test_stores(uuid.uuid4().hex)
    yield user_store, ticket_store
    user_store.close()
    ticket_store.close()


@pytest.fixture
def client(stores) -> Generator[TestClient, None, None]:
    """TestClient on the real app, backed by this test's private stores.

    Function-scoped so every test starts with an empty cookie jar and empty
    tables.
    """
    app.router.lifespan_context = _patch_lifespan(*stores)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def unsafe_client(stores) -> Generator[TestClient, None, None]:
    """Like `client`, but returns 500 responses instead of re-raising server errors."""
    app.router.lifespan_context = _patch_lifespan(*stores)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


def _signup(client: TestClient, email: str, role: str = "USER", password: str = "correct-horse") -> str:
    """Register an account and return its session token.

    The cookie jar is cleared afterwards so callers choose explicitly which
    identity each request carries (via a Bearer header).
    """
    resp = client.post("/signup", json={"email": email, "password": password, "role": role})
    assert resp.status_code == 201, resp.text
    token = resp.cookies["token"]
    client.cookies.clear()
    return token


@pytest.fixture
def signup() -> Callable[..., str]:
    """signup(client, email, role="USER", password=...) -> session token."""
    return _signup
