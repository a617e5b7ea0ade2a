"""
Session Manager

Holds the single authenticated identity of the running process and keeps it in
durable session storage, so a restarted process picks the session back up.

Tenant Linkage Repair:
    Sessions written by older releases may lack a tenant id. When such a session
    is read, the tenant id is taken from the selected tenant entry, or from the
    configured default tenant when none was selected (the default then becomes
    the selected tenant). The repaired session is written back once; afterwards
    reads perform no writes.

Example:
    ```python
    manager = SessionManager(JsonFileSessionStorage(path), default_tenant_id="innova")
    manager.commit(user)
    manager.current().tenant_id  # never empty
    manager.clear()
    ```
"""

from loguru import logger
from pydantic import ValidationError

from services.auth_service.database import (
    SELECTED_TENANT_KEY,
    SESSION_USER_KEY,
    SessionStorage,
)
from services.auth_service.models import Session, User


class SessionManager:
    """Single-session holder with persistence and repair-on-read."""

    def __init__(self, storage: SessionStorage, default_tenant_id: str) -> None:
        self.storage = storage
        self.default_tenant_id = default_tenant_id
        self._user: User | None = None

    @property
    def selected_tenant_id(self) -> str | None:
        return self.storage.get(SELECTED_TENANT_KEY) or None

    def remember_tenant(self, tenant_id: str) -> None:
        """Persist ``tenant_id`` as the selected tenant."""
        self.storage.set(SELECTED_TENANT_KEY, tenant_id)

    def commit(self, user: User) -> Session:
        """
        Make ``user`` the active session and persist it.

        The credential is dropped before the user is held or written. A user
        without a tenant id is repaired the same way as on read.

        Args:
            user: The authenticated user.

        Returns:
            Session whose user has a non-empty tenant_id.
        """
        user = user.model_copy(update={"credential": None})
        if not user.tenant_id:
            user = user.model_copy(update={"tenant_id": self._resolve_tenant_id()})
        self._user = user
        self._persist(user)
        logger.info(f"Session started for {user.username} in tenant {user.tenant_id}")
        return Session(user=user)

    def current(self) -> User | None:
        """
        Return the active user, restoring it from storage if needed.

        Returns:
            The current User with a non-empty tenant_id, or None when no session
            exists or the stored entry cannot be parsed.
        """
        if self._user is not None:
            return self._user

        user = self._load()
        if user is None:
            return None

        if not user.tenant_id:
            tenant_id = self._resolve_tenant_id()
            user = user.model_copy(update={"tenant_id": tenant_id})
            self._persist(user)
            logger.info(f"Repaired stored session for {user.username} with tenant {tenant_id}")

        self._user = user
        return user

    def peek(self) -> User | None:
        """Return the held or stored user as-is, without tenant repair or writes."""
        if self._user is not None:
            return self._user
        return self._load()

    def clear(self) -> None:
        """End the session. The selected tenant entry is kept."""
        self._user = None
        self.storage.remove(SESSION_USER_KEY)

    def _resolve_tenant_id(self) -> str:
        tenant_id = self.selected_tenant_id
        if tenant_id:
            return tenant_id
        self.remember_tenant(self.default_tenant_id)
        return self.default_tenant_id

    def _load(self) -> User | None:
        raw = self.storage.get(SESSION_USER_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable stored session: {e.error_count()} error(s)")
            return None

    def _persist(self, user: User) -> None:
        self.storage.set(SESSION_USER_KEY, user.model_dump_json())
