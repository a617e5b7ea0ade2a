"""
Session Storage
===============
Durable local key-value storage for the process's session state.

Two entries are kept:
    - ``session_user``: the serialized User of the active session
    - ``selected_tenant``: the id of the most recently selected tenant

Both live in one JSON object on disk. Every write replaces the file atomically,
so a crash never leaves a half-written state file behind.

Usage::

    storage = JsonFileSessionStorage(".session/auth_state.json")
    storage.set(SELECTED_TENANT_KEY, "acme")
    storage.get(SELECTED_TENANT_KEY)  # "acme"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import os
from pathlib import Path
import tempfile

from loguru import logger

SESSION_USER_KEY = "session_user"
SELECTED_TENANT_KEY = "selected_tenant"


class SessionStorage(ABC):
    """String key-value storage that survives process restarts."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; a missing key is not an error."""


class JsonFileSessionStorage(SessionStorage):
    """Session storage backed by a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    # ── Public API ────────────────────────────────────────────────

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    # ── Internals ─────────────────────────────────────────────────

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(f"[SESSION] Unreadable session state file {self.path}: {exc}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"[SESSION] Session state file {self.path} is not an object")
            return {}
        return data

    def _write(self, data: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
