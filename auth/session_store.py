"""
auth/session_store.py -- SessionStore adapter over a mutable mapping.

In the running app the mapping is Starlette's request.session (populated by
SessionMiddleware from the signed session cookie), so the storage engine and
the cookie mechanics stay in Starlette. Unit tests pass a plain dict.

Values must stay JSON-serializable: SessionMiddleware json-encodes the whole
mapping into the cookie on every response.

Layer rule: no imports from api/, albums/, or audit/.
"""

from __future__ import annotations

from collections.abc import MutableMapping


class MappingSessionStore:
    """SessionStore backed by any MutableMapping[str, object]."""

    def __init__(self, data: MutableMapping[str, object]) -> None:
        self._data = data

    def get(self, key: str, default: object = None) -> object:
        return self._data.get(key, default)

    def put(self, key: str, value: object) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def flush(self) -> None:
        self._data.clear()
