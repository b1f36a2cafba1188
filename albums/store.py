"""
albums/store.py -- SQLAlchemy Core persistence layer for albums.

Pattern: Repository + Data Mapper, same as auth/store.py.

Album ids are generated here with secrets.token_urlsafe so they are opaque
strings. SessionAuthority's visible-album allowlist stores these ids.
"""

from __future__ import annotations

import secrets

from sqlalchemy import Column, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from albums.models import Album
from auth.store import make_engine, now_iso
from core.config import get_settings

_metadata = MetaData()

_albums = Table(
    "albums",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("owner_id", Integer, nullable=False),
    Column("public", Integer, nullable=False, server_default="0"),
    Column("hashed_password", Text),  # NULL = no password
    Column("created_at", String(32), nullable=False),
)


def _new_album_id() -> str:
    return secrets.token_urlsafe(12)


class AlbumStore:
    """Repository for Album entities.

    Usage:
        albums = AlbumStore()
        album_id = albums.create_album(Album(title="Holidays", owner_id=7, public=True))
        albums.get_album(album_id)
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        _metadata.create_all(self.engine)

    def create_album(self, album: Album) -> str:
        """Insert a new album and return its generated id."""
        album_id = _new_album_id()
        with self.engine.connect() as conn:
            conn.execute(
                _albums.insert().values(
                    id=album_id,
                    title=album.title,
                    owner_id=album.owner_id,
                    public=1 if album.public else 0,
                    hashed_password=album.hashed_password or None,
                    created_at=now_iso(),
                )
            )
            conn.commit()
        return album_id

    def get_album(self, album_id: str) -> Album | None:
        with self.engine.connect() as conn:
            row = conn.execute(_albums.select().where(_albums.c.id == album_id)).fetchone()
        return _row_to_album(row) if row is not None else None

    def list_albums(self, owner_id: int | None = None) -> list[Album]:
        """Return albums newest first, optionally only those owned by owner_id."""
        query = _albums.select().order_by(_albums.c.created_at.desc())
        if owner_id is not None:
            query = query.where(_albums.c.owner_id == owner_id)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_album(r) for r in rows]

    def delete_album(self, album_id: str) -> bool:
        """Delete an album. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_albums.delete().where(_albums.c.id == album_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_album(row) -> Album:
    return Album(
        id=row.id,
        title=row.title,
        owner_id=row.owner_id,
        public=bool(row.public),
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
