"""
api/main.py -- FastAPI application entry point for GalleryGate.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. SessionMiddleware -- loads request.session from the signed cookie and
                          writes it back on the response
  2. log_requests      -- method, path, status, latency, client address

Lifespan opens the four stores (users, configs, albums, audit log) on
startup and disposes them on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from albums.store import AlbumStore
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.albums import router as albums_router
from api.routes.v1.logs import router as logs_router
from api.routes.v1.session import router as session_router
from api.routes.v1.users import router as users_router
from audit.store import AuditLog
from auth.config_store import ConfigStore
from auth.exceptions import AdminHasNoUserRecord, AuthError, NotAuthenticated, UserNotFound
from auth.store import UserStore
from core.config import get_settings

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("gallerygate.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores on startup and dispose them on shutdown.

    All four stores share settings.database_url; each owns its own engine.
    """
    logger.info("GalleryGate API starting up")
    app.state.user_store = UserStore()
    app.state.config_store = ConfigStore()
    app.state.album_store = AlbumStore()
    app.state.audit = AuditLog()
    if not app.state.config_store.has_admin_credentials():
        logger.warning("No admin credentials configured -- every session is granted admin access")

    yield

    app.state.user_store.close()
    app.state.config_store.close()
    app.state.album_store.close()
    app.state.audit.close()
    logger.info("GalleryGate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="GalleryGate API",
    description="Session authentication and album access control for a photo gallery.",
    version=VERSION,
    lifespan=lifespan,
)

# SessionMiddleware owns the cookie mechanics: it signs the session payload
# with SECRET_KEY (itsdangerous) and json-encodes it into the cookie.
app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.secret_key,
    session_cookie=_settings.session_cookie,
    max_age=_settings.session_max_age,
    same_site="lax",
    https_only=_settings.secure_cookies,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
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


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(session_router, prefix="/api/v1", tags=["Session"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(albums_router, prefix="/api/v1", tags=["Albums"])
app.include_router(logs_router, prefix="/api/v1", tags=["Logs"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map SessionAuthority exceptions that escaped a route to HTTP responses.

    NotAuthenticated -> 401.
    UserNotFound     -> 401 and the stale session is flushed; the account is gone.
    AdminHasNoUserRecord is a bug in the calling route -> 500.
    """
    if isinstance(exc, NotAuthenticated):
        return _error(401, exc.code, "Login required.")
    if isinstance(exc, UserNotFound):
        request.session.clear()
        return _error(401, exc.code, "Your account no longer exists. Please log in again.")
    if isinstance(exc, AdminHasNoUserRecord):
        logger.error("Route asked for the admin's user record on %s %s", request.method, request.url.path)
    return _error(500, exc.code, "An unexpected error occurred.")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with a dict detail; use it directly
    as the error field rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "An unexpected error occurred.")


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
