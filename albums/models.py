"""
albums/models.py -- Domain dataclass for albums.

Pure data container. Access decisions (owner, public, unlocked) are made in
api/routes/v1/albums.py with SessionAuthority, not here.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Album:
    """A photo album.

    id is a short random string, not an integer, so album URLs are not
    enumerable. owner_id is ADMIN_ID (0) for albums created by the admin.

    hashed_password is None for albums that need no password to unlock.
    A public album without a password is visible to everyone.
    """

    title: str
    owner_id: int
    id: str | None = None
    public: bool = False
    hashed_password: str | None = None
    created_at: str | None = None

    @property
    def requires_password(self) -> bool:
        return bool(self.hashed_password)
