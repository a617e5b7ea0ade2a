"""
Pytest configuration and fixtures for auth service tests.

The credential store, tenant directory and session storage are replaced by
in-memory implementations of the same interfaces. Each fake records the calls
it receives so tests can assert on store and directory traffic.
"""

import asyncio
import os
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import pytest

# Set test environment variables before importing modules
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_USER", "postgres")
os.environ.setdefault("POSTGRES_PASSWORD", "postgres")
os.environ.setdefault("POSTGRES_DATABASE", "auth_test")
os.environ.setdefault("ENVIRONMENT", "DEV")

from common.exceptions import (
    StoreUnavailableError,
    TenantConfigLoadError,
    UsernameTakenError,
)
from services.auth_service.database import (
    CredentialStore,
    JsonFileSessionStorage,
    SessionStorage,
    TenantDirectory,
)
from services.auth_service.models import Tenant, TenantConfig, User
from services.auth_service.services import (
    Authenticator,
    LegacyCredentialProber,
    SessionManager,
)

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
DEFAULT_TENANT_ID = "innova"


class InMemoryCredentialStore(CredentialStore):
    """Credential store keeping rows in a list, unique on username."""

    def __init__(self) -> None:
        self.rows: list[User] = []
        self.available = True
        self.lookups: list[str] = []
        self.inserts: list[User] = []
        self.touches: list[tuple[str, datetime]] = []

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailableError(internal_error=ConnectionError("store down"))

    def add(self, user: User, credential: str) -> User:
        stored = user.model_copy(update={"credential": credential})
        self.rows.append(stored)
        return stored

    async def find_active_by_username(self, username: str) -> User | None:
        self.lookups.append(username)
        self._check_available()
        for row in self.rows:
            if row.username == username and row.is_active:
                return row
        return None

    async def username_exists(self, username: str) -> bool:
        self._check_available()
        return any(row.username == username for row in self.rows)

    async def insert(self, user: User, credential: str) -> User:
        self._check_available()
        if any(row.username == user.username for row in self.rows):
            raise UsernameTakenError()
        self.inserts.append(user)
        return self.add(user, credential)

    async def touch_last_login(self, user_id: str, at: datetime) -> None:
        self._check_available()
        self.touches.append((user_id, at))
        self.rows = [
            row.model_copy(update={"last_login_at": at}) if row.id == user_id else row
            for row in self.rows
        ]


class InMemoryTenantDirectory(TenantDirectory):
    """Tenant directory over a list of tenants and a dict of bundles."""

    def __init__(self) -> None:
        self.tenants: list[Tenant] = []
        self.bundles: dict[str, Mapping[str, Any]] = {}
        self.failing: set[str] = set()
        self.delays: dict[str, float] = {}
        self.available = True
        self.list_calls = 0
        self.loaded: list[str] = []
        self.fetched: list[str] = []

    def add(
        self,
        tenant_id: str,
        name: str | None = None,
        identification_number: str | None = None,
        bundle: Mapping[str, Any] | None = None,
        is_default: bool = False,
    ) -> Tenant:
        tenant = Tenant(
            id=tenant_id,
            display_name=name or tenant_id.title(),
            identification_number=identification_number,
            is_default=is_default,
        )
        self.tenants.append(tenant)
        self.bundles[tenant_id] = dict(bundle or {})
        return tenant

    @property
    def touched(self) -> bool:
        return self.list_calls > 0 or bool(self.loaded) or bool(self.fetched)

    async def list_tenants(self) -> list[Tenant]:
        self.list_calls += 1
        if not self.available:
            raise StoreUnavailableError("Tenant directory is unavailable.")
        return list(self.tenants)

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        self.fetched.append(tenant_id)
        return next((t for t in self.tenants if t.id == tenant_id), None)

    async def load_config(self, tenant_id: str) -> TenantConfig:
        self.loaded.append(tenant_id)
        if tenant_id in self.delays:
            await asyncio.sleep(self.delays[tenant_id])
        if tenant_id in self.failing:
            raise TenantConfigLoadError(internal_error=ConnectionError("settings read failed"))
        if tenant_id not in self.bundles:
            return TenantConfig()
        return TenantConfig.from_bundle(self.bundles[tenant_id], tenant_id=tenant_id)


class InMemorySessionStorage(SessionStorage):
    """Session storage over a dict, counting writes."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.writes += 1
        self.data.pop(key, None)


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    """Return an empty in-memory credential store."""
    return InMemoryCredentialStore()


@pytest.fixture
def tenant_directory() -> InMemoryTenantDirectory:
    """Return an empty in-memory tenant directory."""
    return InMemoryTenantDirectory()


@pytest.fixture
def session_storage() -> InMemorySessionStorage:
    """Return empty in-memory session storage."""
    return InMemorySessionStorage()


@pytest.fixture
def file_session_storage(tmp_path) -> JsonFileSessionStorage:
    """Return JSON file session storage inside a temporary directory."""
    return JsonFileSessionStorage(tmp_path / "state" / "auth_state.json")


@pytest.fixture
def session_manager(session_storage) -> SessionManager:
    return SessionManager(session_storage, default_tenant_id=DEFAULT_TENANT_ID)


@pytest.fixture
def fallback_passwords() -> dict[str, list[str]]:
    """Return the per-tenant fallback passwords used by legacy identification-number logins."""
    return {}


@pytest.fixture
def legacy_prober(tenant_directory, fallback_passwords) -> LegacyCredentialProber:
    return LegacyCredentialProber(
        tenant_directory,
        fallback_passwords=fallback_passwords,
        config_load_timeout=0.5,
        probe_timeout=2.0,
    )


@pytest.fixture
def authenticator(
    credential_store, tenant_directory, session_manager, legacy_prober
) -> Authenticator:
    """Return an authenticator wired to the in-memory fakes with a fixed clock."""
    return Authenticator(
        credential_store=credential_store,
        tenant_directory=tenant_directory,
        session_manager=session_manager,
        legacy_prober=legacy_prober,
        now=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_user():
    """Create a User factory."""
    def _make_user(
        username: str = "alice",
        tenant_id: str | None = "acme",
        user_id: str | None = None,
        **overrides: Any,
    ) -> User:
        return User(
            id=user_id or f"user-{username}",
            username=username,
            tenant_id=tenant_id,
            **overrides,
        )

    return _make_user
