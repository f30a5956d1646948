"""
api/main.py -- FastAPI application entry point for the ticket tracker.

Run with:  python main.py serve
           uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- one configured browser origin, credentials allowed so
                       the token cookie travels with cross-origin requests
  2. log_requests   -- one log line per request with status and latency;
                       turns unexpected exceptions into the 500 error body

Lifespan opens the user and ticket stores on startup and closes them on
shutdown. Tests replace the lifespan to inject in-memory stores.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.tickets import router as tickets_router
from auth.store import UserStore
from core.config import get_settings
from core.errors import TrackerError
from tickets.store import TicketStore

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("tickettracker.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores before the first request and close them at shutdown.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    logger.info("Ticket tracker API starting up")
    app.state.user_store = UserStore(_settings.database_url)
    app.state.ticket_store = TicketStore(_settings.database_url)
    logger.info("Stores initialized (users present=%s)", app.state.user_store.has_users())

    yield

    app.state.ticket_store.close()
    app.state.user_store.close()
    logger.info("Ticket tracker API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Ticket Tracker API",
    description="Support tickets: users open them, admins move them through OPEN / IN_PROGRESS / CLOSED.",
    version=__version__,
    lifespan=lifespan,
)


def _error_response(status_code: int, code: str, message: str, detail: str | None = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code, detail=detail).model_dump(),
        headers=headers,
    )


def _internal_error_response() -> JSONResponse:
    return _error_response(500, "internal_error", "Internal Server Error")


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Registered before CORSMiddleware so it sits inside it: responses built here,
# including the 500 for an unexpected exception, still get CORS headers.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # The raw exception goes to the log only, never to the response body.
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        response = _internal_error_response()
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=[_settings.client_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Router registration
#
# No prefix: the browser client calls /signup, /tickets, ... at the root.
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(tickets_router, tags=["Tickets"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse body: {"error": message,
# "code": code, "detail": ...}.
# ---------------------------------------------------------------------------


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Render domain errors (duplicate user, invalid status, ...) with their own status."""
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when the request body fails validation."""
    return _error_response(422, "validation_error", "Request validation failed.", detail=str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Registered on the Starlette base class so routing 404s and 405s are
    rendered the same way as errors raised by handlers.

    The auth dependencies raise HTTPException with a dict detail
    ({"code", "message"}); unpack it rather than stringifying it.
    """
    headers = getattr(exc, "headers", None)
    if isinstance(exc.detail, dict):
        return _error_response(exc.status_code, exc.detail["code"], exc.detail["message"], headers=headers)
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail), headers=headers)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for errors raised outside log_requests."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _internal_error_response()


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
