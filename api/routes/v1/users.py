"""
api/routes/v1/users.py -- User management endpoints (admin only).

Routes:
  POST   /api/v1/users            -- create a user
  GET    /api/v1/users            -- list all users
  PATCH  /api/v1/users/{user_id}  -- update username/password/upload/lock
  DELETE /api/v1/users/{user_id}  -- delete a user

The admin is not a row in the users table and cannot be managed here.
Sessions of a deleted user fail on their next request with UserNotFound.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from api.models import MessageResponse, UserCreate, UserPatch, UserResponse
from auth.dependencies import require_admin
from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore

# Auth policy:
# - every route: requires admin -- router-level dependency, handlers do not repeat it
router = APIRouter(dependencies=[Depends(require_admin)])


def _to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        upload=user.upload,
        lock=user.lock,
        created_at=user.created_at,
    )


def _username_taken() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"code": "username_taken", "message": "A user with that username already exists."},
    )


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(request: Request, body: UserCreate) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    user = User(
        username=body.username,
        hashed_password=hash_password(body.password),
        upload=body.upload,
        lock=body.lock,
    )
    try:
        user_id = user_store.create_user(user)
    except IntegrityError:
        raise _username_taken() from None
    return _to_response(user_store.get_by_id(user_id))


@router.get("/users", response_model=list[UserResponse])
def list_users(request: Request) -> list[UserResponse]:
    user_store: UserStore = request.app.state.user_store
    return [_to_response(u) for u in user_store.list_users()]


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(request: Request, user_id: int, body: UserPatch) -> UserResponse:
    """Apply the non-null fields of the body. A new password is hashed before storage."""
    user_store: UserStore = request.app.state.user_store
    fields = body.model_dump(exclude_none=True)
    if "password" in fields:
        fields["hashed_password"] = hash_password(fields.pop("password"))
    try:
        updated = user_store.update_user(user_id, **fields)
    except IntegrityError:
        raise _username_taken() from None
    if not updated:
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": "User not found."})
    return _to_response(user_store.get_by_id(user_id))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(request: Request, user_id: int) -> MessageResponse:
    user_store: UserStore = request.app.state.user_store
    if not user_store.delete_user(user_id):
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": "User not found."})
    return MessageResponse(message="User deleted.")
