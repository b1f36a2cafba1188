"""
tests/test_api_routes.py -- Integration tests for the session, user, album and log routes.

These tests run the full stack: SessionMiddleware cookie -> FastAPI dependency
injection -> SessionAuthority -> SQLAlchemy stores -> response models.

Coverage:
  - Session: login (admin and user), generic 401 on bad credentials, /me, logout
  - Users: admin-only CRUD, 401/403 for guests and regular users
  - Stale session: a deleted user's session gets 401 user_not_found and is cleared
  - Albums: upload permission, visibility rules, password unlock, grants dropped on logout
  - Logs: successful logins are audited and readable by the admin

Fixtures used (from conftest.py):
  - stores: module-scoped stores with admin credentials, "uploader" and "viewer"
  - client: fresh TestClient per test (empty cookie jar)
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from auth.models import User
from auth.passwords import hash_password
from tests.conftest import (
    ADMIN_NAME,
    ADMIN_PASSWORD,
    UPLOADER_PASSWORD,
    VIEWER_PASSWORD,
    Stores,
    login,
    login_admin,
)


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestSessionRoutes:
    def test_init_with_credentials_stays_guest(self, client: TestClient) -> None:
        """With admin credentials configured, /session/init must not log anybody in."""
        resp = client.post("/api/v1/session/init")
        assert resp.status_code == 200
        data = resp.json()
        assert data["login"] is False
        assert data["admin"] is False
        assert data["config_required"] is False

    def test_admin_login(self, client: TestClient) -> None:
        resp = client.post("/api/v1/session/login", json={"username": ADMIN_NAME, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200, resp.text
        assert resp.headers["Cache-Control"] == "no-store"
        data = resp.json()
        assert data["admin"] is True
        assert data["upload"] is True
        assert data["user_id"] == 0

        me = client.get("/api/v1/session/me").json()
        assert me["admin"] is True

    def test_user_login(self, client: TestClient, stores: Stores) -> None:
        login(client, "uploader", UPLOADER_PASSWORD)
        me = client.get("/api/v1/session/me")
        assert me.status_code == 200
        data = me.json()
        assert data["admin"] is False
        assert data["upload"] is True
        assert data["user_id"] == stores.uploader_id
        assert data["username"] == "uploader"

    def test_bad_credentials_are_indistinguishable(self, client: TestClient) -> None:
        """Unknown username and wrong password must produce identical responses."""
        wrong_pw = client.post("/api/v1/session/login", json={"username": "viewer", "password": "nope"})
        unknown = client.post("/api/v1/session/login", json={"username": "ghost", "password": "nope"})
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()
        assert wrong_pw.json()["error"]["code"] == "bad_credentials"

    def test_failed_login_keeps_guest(self, client: TestClient) -> None:
        client.post("/api/v1/session/login", json={"username": "viewer", "password": "nope"})
        assert client.get("/api/v1/session/me").status_code == 401

    def test_me_unauthenticated(self, client: TestClient) -> None:
        resp = client.get("/api/v1/session/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "not_authenticated"

    def test_logout(self, client: TestClient) -> None:
        login(client, "viewer", VIEWER_PASSWORD)
        assert client.get("/api/v1/session/me").status_code == 200
        assert client.post("/api/v1/session/logout").status_code == 200
        assert client.get("/api/v1/session/me").status_code == 401

    def test_setup_refused_once_configured(self, client: TestClient) -> None:
        login_admin(client)
        resp = client.post("/api/v1/session/setup", json={"username": "x", "password": "y"})
        assert resp.status_code == 409


class TestUserRoutes:
    def test_guest_gets_401(self, client: TestClient) -> None:
        assert client.get("/api/v1/users").status_code == 401

    def test_regular_user_gets_403(self, client: TestClient) -> None:
        login(client, "viewer", VIEWER_PASSWORD)
        assert client.get("/api/v1/users").status_code == 403

    def test_admin_crud(self, client: TestClient) -> None:
        login_admin(client)

        created = client.post("/api/v1/users", json={"username": "carol", "password": "carolpw", "upload": True})
        assert created.status_code == 201, created.text
        user_id = created.json()["id"]
        assert created.json()["upload"] is True

        dup = client.post("/api/v1/users", json={"username": "carol", "password": "other"})
        assert dup.status_code == 409

        names = [u["username"] for u in client.get("/api/v1/users").json()]
        assert "carol" in names

        patched = client.patch(f"/api/v1/users/{user_id}", json={"upload": False, "lock": True})
        assert patched.status_code == 200
        assert patched.json()["upload"] is False
        assert patched.json()["lock"] is True

        assert client.delete(f"/api/v1/users/{user_id}").status_code == 200
        assert client.delete(f"/api/v1/users/{user_id}").status_code == 404

    def test_password_change_takes_effect(self, client: TestClient, stores: Stores) -> None:
        user_id = stores.users.create_user(User(username="dave", hashed_password=hash_password("old-pw")))
        login_admin(client)
        assert client.patch(f"/api/v1/users/{user_id}", json={"password": "new-pw"}).status_code == 200
        client.post("/api/v1/session/logout")

        old = client.post("/api/v1/session/login", json={"username": "dave", "password": "old-pw"})
        assert old.status_code == 401
        login(client, "dave", "new-pw")


class TestStaleSession:
    def test_deleted_user_session_is_cleared(self, client: TestClient, stores: Stores) -> None:
        """A session pointing at a deleted account gets 401 user_not_found, then plain guest."""
        user_id = stores.users.create_user(User(username="erin", hashed_password=hash_password("erin-pw")))
        login(client, "erin", "erin-pw")
        stores.users.delete_user(user_id)

        resp = client.get("/api/v1/session/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "user_not_found"

        again = client.get("/api/v1/session/me")
        assert again.status_code == 401
        assert again.json()["error"]["code"] == "not_authenticated"

        errors = [e for e in stores.audit.list_logs() if e.type == "error"]
        assert any(str(user_id) in e.text for e in errors)


class TestPasswordHandling:
    """Passwords reach bcrypt exactly as sent and never exceed its 72-byte input."""

    def test_create_user_password_over_72_bytes_is_422(self, client: TestClient) -> None:
        login_admin(client)
        resp = client.post("/api/v1/users", json={"username": "longpw", "password": "x" * 100})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_limit_counts_utf8_bytes_not_characters(self, client: TestClient) -> None:
        login_admin(client)
        # 40 characters, 80 bytes.
        resp = client.post("/api/v1/users", json={"username": "accents", "password": "é" * 40})
        assert resp.status_code == 422

    def test_password_of_exactly_72_bytes_works(self, client: TestClient) -> None:
        login_admin(client)
        password = "y" * 72
        created = client.post("/api/v1/users", json={"username": "maxpw", "password": password})
        assert created.status_code == 201, created.text
        client.post("/api/v1/session/logout")
        login(client, "maxpw", password)

    def test_patch_password_over_72_bytes_is_422(self, client: TestClient, stores: Stores) -> None:
        login_admin(client)
        resp = client.patch(f"/api/v1/users/{stores.viewer_id}", json={"password": "z" * 73})
        assert resp.status_code == 422

    def test_login_password_over_72_bytes_is_422(self, client: TestClient) -> None:
        resp = client.post("/api/v1/session/login", json={"username": "viewer", "password": "v" * 73})
        assert resp.status_code == 422

    def test_album_password_over_72_bytes_is_422(self, client: TestClient) -> None:
        login(client, "uploader", UPLOADER_PASSWORD)
        resp = client.post("/api/v1/albums", json={"title": "Long", "public": True, "password": "q" * 73})
        assert resp.status_code == 422

    def test_password_whitespace_is_kept(self, client: TestClient, stores: Stores) -> None:
        """An account created outside the API with padded password can log in."""
        stores.users.create_user(User(username="spacey", hashed_password=hash_password(" pw ")))
        resp = client.post("/api/v1/session/login", json={"username": "spacey", "password": " pw "})
        assert resp.status_code == 200, resp.text

        client.post("/api/v1/session/logout")
        stripped = client.post("/api/v1/session/login", json={"username": "spacey", "password": "pw"})
        assert stripped.status_code == 401

    def test_username_is_still_stripped(self, client: TestClient) -> None:
        login(client, "  viewer  ", VIEWER_PASSWORD)
        assert client.get("/api/v1/session/me").json()["username"] == "viewer"

    def test_api_created_padded_password_round_trips(self, client: TestClient) -> None:
        login_admin(client)
        created = client.post("/api/v1/users", json={"username": "padded", "password": "  two spaces  "})
        assert created.status_code == 201, created.text
        client.post("/api/v1/session/logout")
        login(client, "padded", "  two spaces  ")


class TestAlbumRoutes:
    def _create(self, client: TestClient, **body) -> dict:
        resp = client.post("/api/v1/albums", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    def test_guest_cannot_create(self, client: TestClient) -> None:
        assert client.post("/api/v1/albums", json={"title": "nope"}).status_code == 401

    def test_user_without_upload_cannot_create(self, client: TestClient) -> None:
        login(client, "viewer", VIEWER_PASSWORD)
        assert client.post("/api/v1/albums", json={"title": "nope"}).status_code == 403

    def test_uploader_owns_created_album(self, client: TestClient, stores: Stores) -> None:
        login(client, "uploader", UPLOADER_PASSWORD)
        album = self._create(client, title="Mine")
        assert album["owner_id"] == stores.uploader_id

    def test_admin_album_owner_is_zero(self, client: TestClient) -> None:
        login_admin(client)
        album = self._create(client, title="Admin's")
        assert album["owner_id"] == 0

    def test_private_album_visibility(self, client: TestClient) -> None:
        login(client, "uploader", UPLOADER_PASSWORD)
        album = self._create(client, title="Private")
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 200

        client.post("/api/v1/session/logout")
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 403

        login(client, "viewer", VIEWER_PASSWORD)
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 403
        assert client.post(f"/api/v1/albums/{album['id']}/unlock", json={}).status_code == 403

        client.post("/api/v1/session/logout")
        login_admin(client)
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 200

    def test_public_album_visible_to_guest(self, client: TestClient) -> None:
        login(client, "uploader", UPLOADER_PASSWORD)
        album = self._create(client, title="Public", public=True)
        client.post("/api/v1/session/logout")

        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 200
        listed = [a["id"] for a in client.get("/api/v1/albums").json()]
        assert album["id"] in listed

    def test_password_album_unlock_flow(self, client: TestClient) -> None:
        login(client, "uploader", UPLOADER_PASSWORD)
        album = self._create(client, title="Wedding", public=True, password="rings")
        assert album["requires_password"] is True
        client.post("/api/v1/session/logout")

        locked = client.get(f"/api/v1/albums/{album['id']}")
        assert locked.status_code == 403
        assert locked.json()["error"]["code"] == "password_required"

        wrong = client.post(f"/api/v1/albums/{album['id']}/unlock", json={"password": "nope"})
        assert wrong.status_code == 403
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 403

        right = client.post(f"/api/v1/albums/{album['id']}/unlock", json={"password": "rings"})
        assert right.status_code == 200
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 200

        # Unlocking twice is harmless.
        again = client.post(f"/api/v1/albums/{album['id']}/unlock", json={"password": "rings"})
        assert again.status_code == 200

        client.post("/api/v1/session/logout")
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 403

    def test_missing_album_404(self, client: TestClient) -> None:
        assert client.get("/api/v1/albums/does-not-exist").status_code == 404

    def test_only_owner_or_admin_deletes(self, client: TestClient) -> None:
        login(client, "uploader", UPLOADER_PASSWORD)
        album = self._create(client, title="Doomed", public=True)
        client.post("/api/v1/session/logout")

        login(client, "viewer", VIEWER_PASSWORD)
        assert client.delete(f"/api/v1/albums/{album['id']}").status_code == 403
        client.post("/api/v1/session/logout")

        login_admin(client)
        assert client.delete(f"/api/v1/albums/{album['id']}").status_code == 200
        assert client.get(f"/api/v1/albums/{album['id']}").status_code == 404


class TestLogRoutes:
    def test_login_is_audited(self, client: TestClient) -> None:
        login(client, "viewer", VIEWER_PASSWORD)
        client.post("/api/v1/session/logout")
        login_admin(client)

        resp = client.get("/api/v1/logs", params={"limit": 10})
        assert resp.status_code == 200
        texts = [e["text"] for e in resp.json()]
        assert any("User (viewer) has logged in from" in t for t in texts)
        assert any(f"User ({ADMIN_NAME}) has logged in from" in t for t in texts)

    def test_regular_user_cannot_read_logs(self, client: TestClient) -> None:
        login(client, "viewer", VIEWER_PASSWORD)
        assert client.get("/api/v1/logs").status_code == 403
