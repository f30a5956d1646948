"""
api/routes/tickets.py -- Ticket REST endpoints.

Routes:
  POST  /tickets                -- open a ticket (any signed-in user)
  GET   /tickets                -- every ticket (ADMIN)
  GET   /userTickets            -- the caller's own tickets (any signed-in user)
  GET   /tickets/{id}           -- one ticket, if the caller may view it
  PATCH /tickets/{id}/status    -- change status (ADMIN)

Auth is applied per route through the require_user / require_admin
dependencies; handlers receive verified TokenClaims and never read the cookie
themselves. Domain failures (invalid_status, invalid_ticket,
ticket_not_found) propagate as TrackerError and are rendered by the handler
in api/main.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import TicketCreate, TicketResponse, TicketStatusResponse, TicketStatusUpdate
from auth.dependencies import require_admin, require_user
from auth.models import TokenClaims
from tickets import rules
from tickets.store import TicketStore

router = APIRouter()


@router.post("/tickets", response_model=TicketResponse)
def create_ticket(
    request: Request,
    body: TicketCreate,
    claims: TokenClaims = Depends(require_user),
) -> TicketResponse:
    """Open a ticket owned by the caller. New tickets always start at OPEN."""
    store: TicketStore = request.app.state.ticket_store
    ticket = rules.create_ticket(store, claims.user_id, body.title, body.description)
    return TicketResponse.from_ticket(ticket)


@router.get("/tickets", response_model=list[TicketResponse])
def list_tickets(
    request: Request,
    claims: TokenClaims = Depends(require_admin),
) -> list[TicketResponse]:
    """List every ticket in the system. Admin only."""
    store: TicketStore = request.app.state.ticket_store
    return [TicketResponse.from_ticket(t) for t in rules.list_all(store)]


@router.get("/userTickets", response_model=list[TicketResponse])
def list_user_tickets(
    request: Request,
    claims: TokenClaims = Depends(require_user),
) -> list[TicketResponse]:
    """List the tickets owned by the caller, whatever their role."""
    store: TicketStore = request.app.state.ticket_store
    return [TicketResponse.from_ticket(t) for t in rules.list_owned(store, claims.user_id)]


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    request: Request,
    ticket_id: str,
    claims: TokenClaims = Depends(require_user),
) -> TicketResponse:
    """Return one ticket. Tickets owned by someone else look missing to a USER."""
    store: TicketStore = request.app.state.ticket_store
    return TicketResponse.from_ticket(rules.get_visible_ticket(store, ticket_id, claims))


@router.patch("/tickets/{ticket_id}/status", response_model=TicketStatusResponse)
def update_ticket_status(
    request: Request,
    ticket_id: str,
    body: TicketStatusUpdate,
    claims: TokenClaims = Depends(require_admin),
) -> TicketStatusResponse:
    """Set a ticket's status to OPEN, IN_PROGRESS or CLOSED. Admin only.

    Any status may follow any other; only the value itself is validated.
    """
    store: TicketStore = request.app.state.ticket_store
    ticket = rules.set_status(store, ticket_id, body.status)
    return TicketStatusResponse(
        message="Ticket status updated successfully",
        ticket=TicketResponse.from_ticket(ticket),
    )
