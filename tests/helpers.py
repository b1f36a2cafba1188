"""
tests/helpers.py -- In-memory fakes for SessionAuthority's collaborators.

The fakes keep unit tests free of bcrypt and SQLite: PlainVerifier treats
"hash:<plaintext>" as the hash of <plaintext>, and FakeUsers counts lookups
so caching behavior can be asserted.
"""

from __future__ import annotations

from auth.models import AdminCredentials, User
from auth.session import SessionAuthority
from auth.session_store import MappingSessionStore


def fake_hash(plain: str) -> str:
    return f"hash:{plain}"


class PlainVerifier:
    def __init__(self) -> None:
        self.calls = 0

    def verify(self, plaintext: str, hashed: str) -> bool:
        self.calls += 1
        return bool(hashed) and hashed == fake_hash(plaintext)


class FakeUsers:
    def __init__(self, *users: User, max_id_lookups: int | None = None) -> None:
        self.users = {u.id: u for u in users}
        self.id_lookups = 0
        self.max_id_lookups = max_id_lookups

    def get_by_id(self, user_id: int) -> User | None:
        self.id_lookups += 1
        if self.max_id_lookups is not None and self.id_lookups > self.max_id_lookups:
            raise AssertionError(f"get_by_id called {self.id_lookups} times")
        return self.users.get(user_id)

    def get_by_username(self, username: str) -> User | None:
        return next((u for u in self.users.values() if u.username == username), None)


class FakeConfig:
    def __init__(self, username: str = "", password: str = "") -> None:
        self.credentials = AdminCredentials(username=username, password=password)

    def get(self) -> AdminCredentials:
        return self.credentials


class RecordingAudit:
    def __init__(self) -> None:
        self.notices: list[tuple[str, str]] = []
        self.errors: list[tuple[str, str]] = []

    def notice(self, function: str, text: str) -> None:
        self.notices.append((function, text))

    def error(self, function: str, text: str) -> None:
        self.errors.append((function, text))


def make_authority(
    session: dict | None = None,
    users: FakeUsers | None = None,
    config: FakeConfig | None = None,
    audit: RecordingAudit | None = None,
    verifier: PlainVerifier | None = None,
    allow_log_as_id: bool = False,
) -> SessionAuthority:
    return SessionAuthority(
        session=MappingSessionStore(session if session is not None else {}),
        users=users if users is not None else FakeUsers(),
        config=config if config is not None else FakeConfig(fake_hash("admin"), fake_hash("adminpw")),
        verifier=verifier if verifier is not None else PlainVerifier(),
        audit=audit if audit is not None else RecordingAudit(),
        allow_log_as_id=allow_log_as_id,
    )
