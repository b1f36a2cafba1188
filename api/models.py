"""
API request and response models for GalleryGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
albums/models.py, which own the internal domain representation. Route
handlers map between the two.
"""

from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from auth.passwords import MAX_PASSWORD_BYTES, fits_bcrypt


def _within_bcrypt_limit(value: str) -> str:
    if not fits_bcrypt(value):
        raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


# Usernames and titles are stripped. Passwords are used exactly as sent, so
# they match hashes written by the CLI and ConfigStore.
_Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
_Password = Annotated[str, StringConstraints(min_length=1, max_length=255), AfterValidator(_within_bcrypt_limit)]
# The admin username is bcrypt-hashed like a password.
_AdminName = Annotated[_Name, AfterValidator(_within_bcrypt_limit)]

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/session/login."""

    username: _Name
    password: _Password


class AdminSetupRequest(BaseModel):
    """Request body for POST /api/v1/session/setup."""

    username: _AdminName
    password: _Password


class SessionStatus(BaseModel):
    """Response for POST /session/init, /session/login and GET /session/me.

    user_id is 0 for the admin and None for guests. config_required tells the
    client that no admin credentials are set yet (first run).
    """

    model_config = ConfigDict(frozen=True)

    login: bool
    admin: bool
    upload: bool
    user_id: Optional[int] = None
    username: Optional[str] = None
    config_required: bool = False


# ---------------------------------------------------------------------------
# Users (admin only)
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Request body for POST /api/v1/users."""

    username: _Name
    password: _Password
    upload: bool = False
    lock: bool = False


class UserPatch(BaseModel):
    """Request body for PATCH /api/v1/users/{user_id}. Omitted fields are unchanged."""

    username: Optional[_Name] = None
    password: Optional[_Password] = None
    upload: Optional[bool] = None
    lock: Optional[bool] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    upload: bool
    lock: bool
    created_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Albums
# ---------------------------------------------------------------------------


class AlbumCreate(BaseModel):
    """Request body for POST /api/v1/albums."""

    title: _Name
    public: bool = False
    password: Optional[_Password] = None


class AlbumUnlock(BaseModel):
    """Request body for POST /api/v1/albums/{album_id}/unlock."""

    password: Optional[str] = Field(default=None, max_length=255)


class AlbumResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    owner_id: int
    public: bool
    requires_password: bool
    created_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Audit log (admin only)
# ---------------------------------------------------------------------------


class LogEntryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    type: str
    function: str
    text: str
    created_at: str
