"""
auth/config_store.py -- Key/value configs table holding the admin credentials.

The admin has no row in the users table. Its username and password are two
rows in configs, both stored as bcrypt hashes. The empty string is the
"unset" sentinel: a fresh database is seeded with username="" and
password="", which makes SessionAuthority.try_passwordless_login() grant
admin access until someone sets real credentials.

Seeding uses INSERT OR IGNORE semantics (insert only missing keys) so it is
idempotent -- safe to run on every startup.

Layer rule: no imports from api/, albums/, or audit/.
"""

from __future__ import annotations

from sqlalchemy import Column, MetaData, String, Table, Text, select
from sqlalchemy.engine import Engine

from auth.models import AdminCredentials
from auth.passwords import hash_password
from auth.store import make_engine
from core.config import get_settings

_metadata = MetaData()

_configs = Table(
    "configs",
    _metadata,
    Column("key", String(50), primary_key=True),
    Column("value", Text, nullable=False, server_default=""),
)

_ADMIN_KEYS = ("username", "password")


class ConfigStore:
    """Repository for the admin credential configuration.

    Usage:
        configs = ConfigStore()
        configs.get().is_unset          # True on a fresh install
        configs.set_admin_credentials("admin", "secret")
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        _metadata.create_all(self.engine)
        self._seed()

    def _seed(self) -> None:
        with self.engine.connect() as conn:
            existing = set(conn.execute(select(_configs.c.key)).scalars())
            missing = [{"key": key, "value": ""} for key in _ADMIN_KEYS if key not in existing]
            if missing:
                conn.execute(_configs.insert(), missing)
                conn.commit()

    def get(self) -> AdminCredentials:
        """Return the stored admin username/password hashes."""
        with self.engine.connect() as conn:
            rows = conn.execute(select(_configs).where(_configs.c.key.in_(_ADMIN_KEYS))).fetchall()
        values = {key: value or "" for key, value in rows}
        return AdminCredentials(username=values.get("username", ""), password=values.get("password", ""))

    def has_admin_credentials(self) -> bool:
        return not self.get().is_unset

    def set_admin_credentials(self, username: str, password: str) -> None:
        """Hash and store a new admin username and password.

        Both values must be non-empty: storing "" would silently re-open
        passwordless admin access.
        """
        if not username or not password:
            raise ValueError("Admin username and password must both be non-empty.")
        hashed = {"username": hash_password(username), "password": hash_password(password)}
        with self.engine.connect() as conn:
            for key, value in hashed.items():
                conn.execute(_configs.update().where(_configs.c.key == key).values(value=value))
            conn.commit()

    def close(self) -> None:
        self.engine.dispose()
