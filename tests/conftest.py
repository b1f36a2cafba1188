"""
tests/conftest.py -- Shared test fixtures for GalleryGate integration tests.

This module provides:
  - make_test_stores(): isolated named shared-memory DBs for all four stores
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - stores: module-scoped stores with one regular user per upload flag
  - client: a fresh TestClient (empty cookie jar) per test

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker.

DEBUG must be set before any core/api import so get_settings() can
auto-generate SECRET_KEY instead of raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set before any core/api import (get_settings() is lru_cached).
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("TESTING", "true")

import pytest
from fastapi.testclient import TestClient

from albums.store import AlbumStore
from api.main import app
from audit.store import AuditLog
from auth.config_store import ConfigStore
from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore

ADMIN_NAME = "gallery-admin"
ADMIN_PASSWORD = "admin-pass-123"  # noqa: S105
UPLOADER_PASSWORD = "uploader-pass"  # noqa: S105
VIEWER_PASSWORD = "viewer-pass"  # noqa: S105


@dataclass
class Stores:
    users: UserStore
    configs: ConfigStore
    albums: AlbumStore
    audit: AuditLog
    uploader_id: int = 0
    viewer_id: int = 0

    def close(self) -> None:
        self.users.close()
        self.configs.close()
        self.albums.close()
        self.audit.close()


def make_test_stores(db_suffix: str) -> Stores:
    """Create stores on named shared-memory SQLite databases, one per store.

    Args:
        db_suffix: Unique string in the DB name so test modules don't share state.
    """
    suffix = db_suffix.replace(".", "_")

    def url(name: str) -> str:
        return f"sqlite:///file:test_{name}_{suffix}?mode=memory&cache=shared&uri=true"

    return Stores(
        users=UserStore(db_url=url("users")),
        configs=ConfigStore(db_url=url("configs")),
        albums=AlbumStore(db_url=url("albums")),
        audit=AuditLog(db_url=url("audit")),
    )


def _patch_lifespan(stores: Stores):
    """Return a lifespan that wires pre-created test stores into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = stores.users
        app.state.config_store = stores.configs
        app.state.album_store = stores.albums
        app.state.audit = stores.audit
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def stores(request: pytest.FixtureRequest) -> Generator[Stores, None, None]:
    """Module-scoped stores: admin credentials set, one uploader, one viewer."""
    s = make_test_stores(request.module.__name__)
    s.configs.set_admin_credentials(ADMIN_NAME, ADMIN_PASSWORD)
    s.uploader_id = s.users.create_user(
        User(username="uploader", hashed_password=hash_password(UPLOADER_PASSWORD), upload=True)
    )
    s.viewer_id = s.users.create_user(
        User(username="viewer", hashed_password=hash_password(VIEWER_PASSWORD), upload=False)
    )
    yield s
    s.close()


@pytest.fixture
def client(stores: Stores) -> Generator[TestClient, None, None]:
    """Fresh TestClient per test so session cookies never leak between tests."""
    app.router.lifespan_context = _patch_lifespan(stores)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def login(client: TestClient, username: str, password: str) -> None:
    resp = client.post("/api/v1/session/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text


def login_admin(client: TestClient) -> None:
    login(client, ADMIN_NAME, ADMIN_PASSWORD)
