"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, close to zero logic). Stores and
SessionAuthority do the work.

Identity is a small tagged union: Guest | Admin | RegisteredUser(id). The
session store still persists the admin as user_id == ADMIN_ID (0), but
identity_from_session() is the only place that interprets that number.

Layer rule: no imports from api/, albums/, or audit/.
"""

from __future__ import annotations

from dataclasses import dataclass

ADMIN_ID = 0


@dataclass
class User:
    """A regular (non-admin) account.

    upload: the account may create albums and upload media.
    lock:   the account may not change its own password (shared/demo logins).
    """

    username: str
    id: int | None = None
    hashed_password: str | None = None
    upload: bool = False
    lock: bool = False
    created_at: str | None = None


@dataclass(frozen=True)
class AdminCredentials:
    """The admin username/password pair from the configs table.

    Both fields hold bcrypt hashes -- the admin username is hash-compared,
    not string-compared. The empty string means "unset"; both unset means
    the installation has no credentials and grants passwordless admin access.
    """

    username: str = ""
    password: str = ""

    @property
    def is_unset(self) -> bool:
        return self.username == "" and self.password == ""


# ---------------------------------------------------------------------------
# Identity (tagged union)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Guest:
    """No successful login in this session."""


@dataclass(frozen=True)
class Admin:
    """The single administrator. Has no backing User record."""

    id: int = ADMIN_ID


@dataclass(frozen=True)
class RegisteredUser:
    """A logged-in regular user, backed by a row in the users table."""

    id: int


Identity = Guest | Admin | RegisteredUser


def identity_from_session(login: object, user_id: object) -> Identity:
    """Map the raw session fields onto an Identity.

    Only a literal True login counts; a missing or non-int user_id on a
    logged-in session is treated as a guest rather than guessed at.
    """
    if login is not True or not isinstance(user_id, int) or isinstance(user_id, bool):
        return Guest()
    if user_id == ADMIN_ID:
        return Admin()
    if user_id > 0:
        return RegisteredUser(id=user_id)
    return Guest()
