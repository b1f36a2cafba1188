"""
api/routes/v1/session.py -- Session login/logout/status endpoints.

Routes:
  POST /api/v1/session/init    -- passwordless admin login if no credentials are set; returns status
  POST /api/v1/session/login   -- admin credentials first, then a regular user; 401 on failure
  POST /api/v1/session/logout  -- flush the session; 200
  GET  /api/v1/session/me      -- status of the current session (requires login)
  POST /api/v1/session/setup   -- set admin credentials; only while they are unset

Security:
  Wrong username and wrong password return the same generic 401
  ("bad_credentials") so usernames cannot be enumerated.
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import AdminSetupRequest, LoginRequest, MessageResponse, SessionStatus
from auth.config_store import ConfigStore
from auth.dependencies import get_session_authority, require_admin, require_login
from auth.session import SessionAuthority

# Auth policy:
# - POST /api/v1/session/init:    public -- this is how a guest session starts
# - POST /api/v1/session/login:   public
# - POST /api/v1/session/logout:  public -- flushing a guest session is harmless
# - GET  /api/v1/session/me:      requires login (require_login)
# - POST /api/v1/session/setup:   requires admin (require_admin) + credentials still unset
router = APIRouter()


def _client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _status(authority: SessionAuthority, config_store: ConfigStore) -> SessionStatus:
    """Summarize the session without ever asking for the admin's User record."""
    config_required = not config_store.has_admin_credentials()
    if not authority.is_logged_in():
        return SessionStatus(login=False, admin=False, upload=False, config_required=config_required)
    if authority.is_admin():
        return SessionStatus(
            login=True, admin=True, upload=True, user_id=authority.current_id(), config_required=config_required
        )
    user = authority.current_user()
    return SessionStatus(
        login=True,
        admin=False,
        upload=user.upload,
        user_id=user.id,
        username=user.username,
        config_required=config_required,
    )


@router.post("/session/init", response_model=SessionStatus)
def init_session(
    request: Request,
    authority: SessionAuthority = Depends(get_session_authority),
) -> SessionStatus:
    """Return the session status, logging in as admin when no credentials exist yet."""
    config_store: ConfigStore = request.app.state.config_store
    if not authority.is_logged_in():
        authority.try_passwordless_login()
    return _status(authority, config_store)


@router.post("/session/login", response_model=SessionStatus)
def login(
    request: Request,
    body: LoginRequest,
    authority: SessionAuthority = Depends(get_session_authority),
) -> JSONResponse:
    """Authenticate with username and password.

    The admin check runs first; a regular user is tried only if it fails.
    Both failures collapse into one generic 401.
    """
    address = _client_address(request)
    if not (
        authority.authenticate_admin(body.username, body.password, address)
        or authority.authenticate_user(body.username, body.password, address)
    ):
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Invalid username or password."}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(content=_status(authority, request.app.state.config_store).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/session/logout", response_model=MessageResponse)
def logout(authority: SessionAuthority = Depends(get_session_authority)) -> MessageResponse:
    """End the session. Album grants are dropped along with the login."""
    authority.logout()
    return MessageResponse(message="Logged out.")


@router.get("/session/me", response_model=SessionStatus)
def me(request: Request, authority: SessionAuthority = Depends(require_login)) -> SessionStatus:
    return _status(authority, request.app.state.config_store)


@router.post("/session/setup", response_model=MessageResponse)
def setup(
    request: Request,
    body: AdminSetupRequest,
    authority: SessionAuthority = Depends(require_admin),
) -> MessageResponse:
    """Set the admin username and password on first run.

    Refused with 409 once credentials exist -- changing them afterwards is an
    operator task (main.py set-admin), not something a web session may do.
    """
    config_store: ConfigStore = request.app.state.config_store
    if config_store.has_admin_credentials():
        raise HTTPException(
            status_code=409,
            detail={"code": "already_configured", "message": "Admin credentials are already set."},
        )
    config_store.set_admin_credentials(body.username, body.password)
    request.app.state.audit.notice("session.setup", f"Admin credentials set from {_client_address(request)}")
    return MessageResponse(message="Admin credentials saved.")
