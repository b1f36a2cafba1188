"""
api/routes/v1/albums.py -- Album creation, access and unlock endpoints.

Routes:
  POST   /api/v1/albums                    -- create an album (requires upload rights)
  GET    /api/v1/albums                    -- albums visible to the caller
  GET    /api/v1/albums/{album_id}         -- one album, if visible
  POST   /api/v1/albums/{album_id}/unlock  -- grant this session access to a protected album
  DELETE /api/v1/albums/{album_id}         -- delete (owner or admin)

Visibility rules (_can_view):
  1. The owner and the admin always see the album (is_current_user).
  2. A public album without a password is visible to everyone.
  3. A public album with a password is visible once unlocked in this session
     (has_visible_album).
  4. A private album is visible to nobody else. It cannot be unlocked.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from albums.models import Album
from albums.store import AlbumStore
from api.models import AlbumCreate, AlbumResponse, AlbumUnlock, MessageResponse
from auth.dependencies import get_session_authority, require_login, require_upload
from auth.passwords import hash_password, verify_password
from auth.session import SessionAuthority

# Auth policy:
# - POST   /api/v1/albums:                   requires upload rights (require_upload)
# - GET    /api/v1/albums:                   public -- filtered by _can_view
# - GET    /api/v1/albums/{album_id}:        public -- 403 unless _can_view
# - POST   /api/v1/albums/{album_id}/unlock: public -- guests may unlock shared albums
# - DELETE /api/v1/albums/{album_id}:        requires login + owner or admin
router = APIRouter()


def _to_response(album: Album) -> AlbumResponse:
    return AlbumResponse(
        id=album.id,
        title=album.title,
        owner_id=album.owner_id,
        public=album.public,
        requires_password=album.requires_password,
        created_at=album.created_at,
    )


def _can_view(authority: SessionAuthority, album: Album) -> bool:
    if authority.is_current_user(album.owner_id):
        return True
    if not album.public:
        return False
    if not album.requires_password:
        return True
    return authority.has_visible_album(album.id)


def _get_or_404(album_store: AlbumStore, album_id: str) -> Album:
    album = album_store.get_album(album_id)
    if album is None:
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": "Album not found."})
    return album


@router.post("/albums", response_model=AlbumResponse, status_code=201)
def create_album(
    request: Request,
    body: AlbumCreate,
    authority: SessionAuthority = Depends(require_upload),
) -> AlbumResponse:
    """Create an album owned by the caller (owner_id 0 for the admin)."""
    album_store: AlbumStore = request.app.state.album_store
    album = Album(
        title=body.title,
        owner_id=authority.current_id(),
        public=body.public,
        hashed_password=hash_password(body.password) if body.password else None,
    )
    album_id = album_store.create_album(album)
    return _to_response(album_store.get_album(album_id))


@router.get("/albums", response_model=list[AlbumResponse])
def list_albums(
    request: Request,
    authority: SessionAuthority = Depends(get_session_authority),
) -> list[AlbumResponse]:
    album_store: AlbumStore = request.app.state.album_store
    return [_to_response(a) for a in album_store.list_albums() if _can_view(authority, a)]


@router.get("/albums/{album_id}", response_model=AlbumResponse)
def get_album(
    request: Request,
    album_id: str,
    authority: SessionAuthority = Depends(get_session_authority),
) -> AlbumResponse:
    album = _get_or_404(request.app.state.album_store, album_id)
    if not _can_view(authority, album):
        code = "password_required" if album.public and album.requires_password else "forbidden"
        raise HTTPException(status_code=403, detail={"code": code, "message": "Access to this album is denied."})
    return _to_response(album)


@router.post("/albums/{album_id}/unlock", response_model=AlbumResponse)
def unlock_album(
    request: Request,
    album_id: str,
    body: AlbumUnlock,
    authority: SessionAuthority = Depends(get_session_authority),
) -> AlbumResponse:
    """Check the album password and add the album to the session's allowlist.

    Only public albums can be unlocked. Re-unlocking is harmless.
    """
    album = _get_or_404(request.app.state.album_store, album_id)
    if not album.public:
        raise HTTPException(status_code=403, detail={"code": "forbidden", "message": "This album is private."})
    if album.requires_password and not verify_password(body.password or "", album.hashed_password):
        raise HTTPException(status_code=403, detail={"code": "bad_password", "message": "Wrong album password."})
    authority.add_visible_album(album.id)
    return _to_response(album)


@router.delete("/albums/{album_id}", response_model=MessageResponse)
def delete_album(
    request: Request,
    album_id: str,
    authority: SessionAuthority = Depends(require_login),
) -> MessageResponse:
    album_store: AlbumStore = request.app.state.album_store
    album = _get_or_404(album_store, album_id)
    if not authority.is_current_user(album.owner_id):
        raise HTTPException(status_code=403, detail={"code": "forbidden", "message": "Only the owner may delete."})
    album_store.delete_album(album.id)
    return MessageResponse(message="Album deleted.")
