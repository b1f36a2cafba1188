"""
auth/exceptions.py -- Error taxonomy for session identity queries.

Authentication attempts never raise these -- they return booleans so the
calling layer decides how to present "invalid credentials". These exceptions
are raised only by identity/authorization queries that need a logged-in
caller or a backing user record.

Layer rule: no imports from api/, albums/, or audit/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for session identity failures."""

    code = "auth_error"


class NotAuthenticated(AuthError):
    """The session is not logged in (guest access)."""

    code = "not_authenticated"

    def __init__(self) -> None:
        super().__init__("Not logged in.")


class AdminHasNoUserRecord(AuthError):
    """A User record was requested for the admin identity.

    The admin is a sentinel identity with no row in the users table. Callers
    must branch on is_admin() before calling current_user().
    """

    code = "admin_has_no_user_record"

    def __init__(self) -> None:
        super().__init__("The admin identity has no user record.")


class UserNotFound(AuthError):
    """The session references a user id that no longer exists in the store."""

    code = "user_not_found"

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"Could not find specified user ({user_id})")
