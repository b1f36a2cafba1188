"""
auth/session.py -- SessionAuthority: per-request identity and authorization.

One SessionAuthority is built per request (auth/dependencies.py) around that
request's session. It answers "who is the caller" (guest, admin, or a
registered user), "may they upload", and keeps the per-session allowlist of
password-protected albums the caller has unlocked.

Session fields:
  login           True once any authentication path succeeds.
  user_id         ADMIN_ID (0) for the admin, the users.id primary key otherwise.
  visible_albums  Sorted list of unlocked album ids. Absent means none.

The resolved User record is cached on the instance (single slot). The cache
is never shared across requests: the instance lives for one request only.

Concurrency: two requests on the same session each read, modify and write
back the whole session. Concurrent add_visible_album() calls with different
ids can therefore lose one grant (last write wins). Accepted as-is.

Layer rule: no imports from api/, albums/, or audit/.
"""

from __future__ import annotations

from auth.exceptions import AdminHasNoUserRecord, NotAuthenticated, UserNotFound
from auth.interfaces import AdminConfig, AuditLog, CredentialVerifier, SessionStore, UserLookup
from auth.models import ADMIN_ID, Admin, Guest, Identity, RegisteredUser, User, identity_from_session
from auth.passwords import DUMMY_HASH

LOGIN_KEY = "login"
USER_ID_KEY = "user_id"
VISIBLE_ALBUMS_KEY = "visible_albums"


class SessionAuthority:
    """Session-derived identity and authorization decisions for one request.

    Usage:
        authority = SessionAuthority(MappingSessionStore(request.session), users, configs, BcryptVerifier(), audit)
        if authority.authenticate_user("alice", "secret", "1.2.3.4"):
            user = authority.current_user()
    """

    def __init__(
        self,
        session: SessionStore,
        users: UserLookup,
        config: AdminConfig,
        verifier: CredentialVerifier,
        audit: AuditLog,
        allow_log_as_id: bool = False,
    ) -> None:
        self._session = session
        self._users = users
        self._config = config
        self._verifier = verifier
        self._audit = audit
        self._allow_log_as_id = allow_log_as_id
        self._user: User | None = None

    # ------------------------------------------------------------------
    # Identity queries
    # ------------------------------------------------------------------

    def identity(self) -> Identity:
        """Return the caller's Identity. Never raises."""
        return identity_from_session(self._session.get(LOGIN_KEY), self._session.get(USER_ID_KEY))

    def is_logged_in(self) -> bool:
        """Return True for admin and user sessions, False for guests."""
        return self._session.get(LOGIN_KEY) is True

    def is_admin(self) -> bool:
        return isinstance(self.identity(), Admin)

    def current_id(self) -> int:
        """Return the session's user id (ADMIN_ID for the admin).

        Raises NotAuthenticated for guests.
        """
        identity = self.identity()
        if isinstance(identity, Guest):
            raise NotAuthenticated()
        return identity.id

    def can_upload(self) -> bool:
        """Return True if the caller may upload.

        The admin always may. Any other caller needs a User record with the
        upload flag, so a guest gets NotAuthenticated rather than False.
        """
        if self.is_admin():
            return True
        return self.current_user().upload

    def current_user(self) -> User:
        """Return the User record for the logged-in regular user.

        Raises:
            NotAuthenticated:     guest session.
            AdminHasNoUserRecord: the caller is the admin.
            UserNotFound:         the session points at a deleted account.
        """
        if self._user is not None:
            return self._user

        user_id = self.current_id()
        if user_id == ADMIN_ID:
            self._audit.error("SessionAuthority.current_user", "Trying to get a User from Admin ID.")
            raise AdminHasNoUserRecord()

        user = self._users.get_by_id(user_id)
        if user is None:
            self._audit.error("SessionAuthority.current_user", f"Could not find specified user ({user_id})")
            raise UserNotFound(user_id)

        self._user = user
        return user

    def is_current_user(self, user_id: int) -> bool:
        """Return True if the caller is user_id, or is the admin."""
        identity = self.identity()
        if isinstance(identity, Admin):
            return True
        return isinstance(identity, RegisteredUser) and identity.id == user_id

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def try_passwordless_login(self) -> bool:
        """Log in as admin when no admin credentials are configured.

        Returns True (and marks the session as admin) only when both the
        admin username and password are the empty "unset" sentinel.
        """
        if not self._config.get().is_unset:
            return False
        self._login_as(ADMIN_ID)
        return True

    def authenticate_user(self, username: str, password: str, client_address: str) -> bool:
        """Log in as a regular user. Returns False on any failure.

        Unknown usernames and wrong passwords are indistinguishable: both
        return False, leave the session untouched, and both run exactly one
        password verification.
        """
        user = self._users.get_by_username(username)
        if user is None or not user.hashed_password:
            self._verifier.verify(password, DUMMY_HASH)
            return False
        if not self._verifier.verify(password, user.hashed_password):
            return False

        self._login_as(user.id)
        self._user = user
        self._audit.notice(
            "SessionAuthority.authenticate_user", f"User ({username}) has logged in from {client_address}"
        )
        return True

    def authenticate_admin(self, username: str, password: str, client_address: str) -> bool:
        """Log in as the admin. Returns False on any failure.

        The username is checked against a stored hash, same as the password.
        """
        credentials = self._config.get()
        if not self._verifier.verify(username, credentials.username):
            return False
        if not self._verifier.verify(password, credentials.password):
            return False

        self._login_as(ADMIN_ID)
        self._audit.notice(
            "SessionAuthority.authenticate_admin", f"User ({username}) has logged in from {client_address}"
        )
        return True

    def log_as_id(self, user_id: int) -> None:
        """Force a login without credentials. Test environments only."""
        if not self._allow_log_as_id:
            raise RuntimeError("log_as_id() is only available when TESTING=true")
        self._login_as(user_id)

    def logout(self) -> None:
        """Drop the cached user and every session key, album grants included."""
        self._user = None
        self._session.flush()

    def _login_as(self, user_id: int) -> None:
        self._user = None
        self._session.put(LOGIN_KEY, True)
        self._session.put(USER_ID_KEY, user_id)

    # ------------------------------------------------------------------
    # Album visibility allowlist
    # ------------------------------------------------------------------

    def has_visible_album(self, album_id: str) -> bool:
        """Return True if album_id was granted in this session.

        Deny by default. No admin bypass here -- route code decides that.
        Album ids are the opaque strings AlbumStore issues and are compared
        exactly, so 5 and "5" are different ids.
        """
        return album_id in self._visible_albums()

    def add_visible_album(self, album_id: str) -> None:
        """Grant visibility of album_id for the rest of the session. Idempotent."""
        albums = self._visible_albums()
        if album_id in albums:
            return
        albums.add(album_id)
        self._session.put(VISIBLE_ALBUMS_KEY, sorted(albums))

    def _visible_albums(self) -> set[str]:
        stored = self._session.get(VISIBLE_ALBUMS_KEY)
        if not stored:
            return set()
        return set(stored)
