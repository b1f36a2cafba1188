"""
auth/interfaces.py -- Collaborator interfaces consumed by SessionAuthority.

SessionAuthority depends on these Protocols, not on the concrete SQLAlchemy
stores, so unit tests can hand it in-memory fakes and the HTTP layer can
hand it the real stores from app.state.

Layer rule: no imports from api/, albums/, or audit/.
"""

from __future__ import annotations

from typing import Protocol

from auth.models import AdminCredentials, User


class UserLookup(Protocol):
    """Read access to user records."""

    def get_by_id(self, user_id: int) -> User | None:
        """Return the user with this primary key, if present."""

    def get_by_username(self, username: str) -> User | None:
        """Return the user with this exact username, if present."""


class AdminConfig(Protocol):
    """Read access to the admin credential configuration."""

    def get(self) -> AdminCredentials:
        """Return the admin username/password hashes ("" when unset)."""


class CredentialVerifier(Protocol):
    """One-way credential check."""

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return True if plaintext matches hashed."""


class AuditLog(Protocol):
    """Fire-and-forget audit sink. Must never raise to the caller."""

    def notice(self, function: str, text: str) -> None:
        """Record an informational event (successful logins)."""

    def error(self, function: str, text: str) -> None:
        """Record an integrity fault or contract violation."""


class SessionStore(Protocol):
    """Key/value view of the current client's session entry."""

    def get(self, key: str, default: object = None) -> object:
        """Return the value stored under key, or default."""

    def put(self, key: str, value: object) -> None:
        """Store value under key."""

    def has(self, key: str) -> bool:
        """Return True if key is present."""

    def delete(self, key: str) -> None:
        """Remove key if present."""

    def flush(self) -> None:
        """Remove every key in the session."""
