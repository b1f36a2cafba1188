"""
auth/dependencies.py -- FastAPI Depends() helpers for session authorization.

get_session_authority() builds one SessionAuthority per request around
Starlette's request.session. FastAPI caches dependency results per request,
so every dependency below that asks for it receives the SAME instance, and
the single-slot user cache is shared within the request only.

require_login() raises HTTP 401 for guests.
require_admin() raises 401 for guests and 403 for regular users.
require_upload() raises 401 for guests and 403 for users without the upload flag.

Layer rule: no imports from api/, albums/, or audit/.
  auth/dependencies.py may import from fastapi because this module is part
  of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from auth.passwords import BcryptVerifier
from auth.session import SessionAuthority
from auth.session_store import MappingSessionStore
from core.config import get_settings

_verifier = BcryptVerifier()


def get_session_authority(request: Request) -> SessionAuthority:
    """Return the request-scoped SessionAuthority.

    The stores come from app.state (wired in the lifespan). The session
    mapping is request.session, which SessionMiddleware loads from and
    writes back to the signed session cookie.
    """
    state = request.app.state
    return SessionAuthority(
        session=MappingSessionStore(request.session),
        users=state.user_store,
        config=state.config_store,
        verifier=_verifier,
        audit=state.audit,
        allow_log_as_id=get_settings().testing,
    )


def require_login(authority: SessionAuthority = Depends(get_session_authority)) -> SessionAuthority:
    """Require a logged-in session (admin or user). Raises HTTP 401 otherwise."""
    if not authority.is_logged_in():
        raise HTTPException(
            status_code=401,
            detail={"code": "not_authenticated", "message": "Login required."},
        )
    return authority


def require_admin(authority: SessionAuthority = Depends(require_login)) -> SessionAuthority:
    """Require the admin identity. Raises HTTP 401 if unauthenticated, HTTP 403 if not admin."""
    if not authority.is_admin():
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Admin access required."},
        )
    return authority


def require_upload(authority: SessionAuthority = Depends(require_login)) -> SessionAuthority:
    """Require upload rights. Raises HTTP 401 if unauthenticated, HTTP 403 without the upload flag.

    can_upload() may raise UserNotFound for a stale session; the app-level
    AuthError handler turns that into a 401 and clears the session.
    """
    if not authority.can_upload():
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Upload permission required."},
        )
    return authority
