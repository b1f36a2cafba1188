"""
audit/store.py -- Persistent audit log backed by a SQLAlchemy Core table.

Every entry is written to the logs table AND mirrored to the
"gallerygate.audit" stdlib logger, so operators see it on stderr even if
the database write fails.

Fire-and-forget: notice() and error() never raise. A failed insert is
reported with logger.exception and dropped -- an audit hiccup must not turn
a successful login into a failed one.

Usage:
    audit = AuditLog()
    audit.notice("SessionAuthority.authenticate_user", "User (alice) has logged in from 1.2.3.4")
    audit.list_logs(limit=50)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Column, Integer, MetaData, String, Table, Text
from sqlalchemy.exc import SQLAlchemyError

from auth.store import make_engine, now_iso
from core.config import get_settings

logger = logging.getLogger("gallerygate.audit")

_metadata = MetaData()

_logs = Table(
    "logs",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("type", String(10), nullable=False),  # "notice" | "error"
    Column("function", String(100), nullable=False),
    Column("text", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


@dataclass
class LogEntry:
    type: str
    function: str
    text: str
    id: int | None = None
    created_at: str = ""


class AuditLog:
    """Audit sink for SessionAuthority and the admin log endpoints."""

    def __init__(self, db_url: str | None = None) -> None:
        self.engine = make_engine(db_url or get_settings().database_url)
        _metadata.create_all(self.engine)

    def notice(self, function: str, text: str) -> None:
        logger.info("%s: %s", function, text)
        self._write("notice", function, text)

    def error(self, function: str, text: str) -> None:
        logger.error("%s: %s", function, text)
        self._write("error", function, text)

    def _write(self, type_: str, function: str, text: str) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(_logs.insert().values(type=type_, function=function, text=text, created_at=now_iso()))
                conn.commit()
        except SQLAlchemyError:
            logger.exception("Could not persist audit entry from %s", function)

    def list_logs(self, limit: int = 100) -> list[LogEntry]:
        """Return the newest entries first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_logs.select().order_by(_logs.c.id.desc()).limit(limit)).fetchall()
        return [_row_to_entry(r) for r in rows]

    def clear(self) -> int:
        """Delete every entry. Returns the number of rows removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_logs.delete())
            conn.commit()
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


def _row_to_entry(row) -> LogEntry:
    return LogEntry(
        id=row.id,
        type=row.type,
        function=row.function,
        text=row.text,
        created_at=row.created_at,
    )
