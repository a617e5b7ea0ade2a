"""
Tests for the SQL credential store and tenant directory.

Database sessions are replaced by mocks; these tests cover row mapping and
error translation, not SQL.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError, OperationalError

from common.exceptions import (
    StoreUnavailableError,
    TenantConfigLoadError,
    UnknownTenantError,
    UsernameTakenError,
)
from common.models import Companies, Users
from services.auth_service.database import SqlCredentialStore, SqlTenantDirectory
from services.auth_service.models import TenantConfig, User

CREDENTIAL_STORE_SESSION = "services.auth_service.database.credential_store.get_async_db_session"
TENANT_DIRECTORY_SESSION = "services.auth_service.database.tenant_directory.get_async_db_session"


def _fake_session_factory(session):
    @asynccontextmanager
    async def _fake_get_async_db_session(*args, **kwargs):
        yield session

    return _fake_get_async_db_session


def _failing_session_factory(error: Exception):
    @asynccontextmanager
    async def _fake_get_async_db_session(*args, **kwargs):
        raise error
        yield  # pragma: no cover

    return _fake_get_async_db_session


@pytest.fixture
def mock_session():
    """Return a mock AsyncSession."""
    session = MagicMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.get = AsyncMock()
    return session


@pytest.fixture
def users_row() -> Users:
    return Users(
        id="6f1c2a4e-0000-4000-8000-000000000001",
        company_id="acme",
        username="alice",
        password_hash="pw-alice",
        email="alice@acme.example",
        role="user",
        is_active=True,
        last_login=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestSqlCredentialStore:
    """Tests for SqlCredentialStore."""

    @pytest.mark.asyncio
    async def test_find_active_maps_row_to_user(self, mock_session, users_row):
        """Test that the users row becomes a User carrying its credential."""
        mock_session.execute.return_value.scalars.return_value.first.return_value = users_row

        with patch(CREDENTIAL_STORE_SESSION, _fake_session_factory(mock_session)):
            user = await SqlCredentialStore().find_active_by_username("alice")

        assert user.id == users_row.id
        assert user.tenant_id == "acme"
        assert user.credential == "pw-alice"
        assert user.last_login_at == users_row.last_login

    @pytest.mark.asyncio
    async def test_find_active_returns_none_when_missing(self, mock_session):
        """Test that no row yields None."""
        mock_session.execute.return_value.scalars.return_value.first.return_value = None

        with patch(CREDENTIAL_STORE_SESSION, _fake_session_factory(mock_session)):
            assert await SqlCredentialStore().find_active_by_username("nobody") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            OperationalError("SELECT 1", {}, Exception("connection refused")),
            ConnectionRefusedError("connection refused"),
        ],
    )
    async def test_connection_errors_become_store_unavailable(self, error):
        """Test that driver and socket errors raise StoreUnavailableError."""
        with patch(CREDENTIAL_STORE_SESSION, _failing_session_factory(error)):
            with pytest.raises(StoreUnavailableError) as exc_info:
                await SqlCredentialStore().find_active_by_username("alice")

        assert exc_info.value.internal_error is error

    @pytest.mark.asyncio
    async def test_username_exists(self, mock_session):
        """Test that any row for the username counts as existing."""
        mock_session.execute.return_value.first.return_value = ("some-id",)

        with patch(CREDENTIAL_STORE_SESSION, _fake_session_factory(mock_session)):
            assert await SqlCredentialStore().username_exists("alice") is True

    @pytest.mark.asyncio
    async def test_insert_adds_row_with_tenant_and_credential(self, mock_session):
        """Test that insert stores the credential and tenant as columns."""
        user = User(id="u-1", username="root", tenant_id="acme", role="admin")

        with patch(CREDENTIAL_STORE_SESSION, _fake_session_factory(mock_session)):
            stored = await SqlCredentialStore().insert(user, "s3cret")

        row = mock_session.add.call_args.args[0]
        assert isinstance(row, Users)
        assert (row.id, row.company_id, row.password_hash, row.role) == ("u-1", "acme", "s3cret", "admin")
        mock_session.flush.assert_awaited_once()
        assert stored.username == "root"
        assert stored.credential == "s3cret"

    @pytest.mark.asyncio
    async def test_insert_unique_violation_becomes_username_taken(self, mock_session):
        """Test that a constraint violation raises UsernameTakenError."""
        mock_session.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))
        user = User(id="u-1", username="root", tenant_id="acme")

        with patch(CREDENTIAL_STORE_SESSION, _fake_session_factory(mock_session)):
            with pytest.raises(UsernameTakenError):
                await SqlCredentialStore().insert(user, "s3cret")

    @pytest.mark.asyncio
    async def test_insert_foreign_key_violation_becomes_unknown_tenant(self, mock_session):
        """Test that a tenant_id without a company row is not reported as a taken username."""
        orig = Exception("insert or update on table users violates foreign key constraint")
        orig.sqlstate = "23503"
        mock_session.flush.side_effect = IntegrityError("INSERT", {}, orig)
        user = User(id="u-1", username="root", tenant_id="nowhere")

        with patch(CREDENTIAL_STORE_SESSION, _fake_session_factory(mock_session)):
            with pytest.raises(UnknownTenantError):
                await SqlCredentialStore().insert(user, "s3cret")

    @pytest.mark.asyncio
    async def test_insert_requires_tenant(self):
        """Test that users without a tenant are refused."""
        with pytest.raises(ValueError):
            await SqlCredentialStore().insert(User(id="u-1", username="root"), "s3cret")

    @pytest.mark.asyncio
    async def test_touch_last_login_executes_update(self, mock_session):
        """Test that the last login stamp is written."""
        with patch(CREDENTIAL_STORE_SESSION, _fake_session_factory(mock_session)):
            await SqlCredentialStore().touch_last_login("u-1", datetime.now(timezone.utc))

        mock_session.execute.assert_awaited_once()


class TestSqlTenantDirectory:
    """Tests for SqlTenantDirectory."""

    @pytest.mark.asyncio
    async def test_list_tenants_maps_rows(self, mock_session):
        """Test that company rows become Tenants in the returned order."""
        mock_session.execute.return_value.scalars.return_value.all.return_value = [
            Companies(id="innova", name="Innova", identification_number="900", is_default=True),
            Companies(id="acme", name="Acme", identification_number=None, is_default=False),
        ]

        with patch(TENANT_DIRECTORY_SESSION, _fake_session_factory(mock_session)):
            tenants = await SqlTenantDirectory().list_tenants()

        assert [t.id for t in tenants] == ["innova", "acme"]
        assert tenants[0].display_name == "Innova"
        assert tenants[0].identification_number == "900"
        assert tenants[0].is_default is True

    @pytest.mark.asyncio
    async def test_list_tenants_excludes_inactive_companies(self, mock_session):
        """Test that the listing query filters on is_active."""
        mock_session.execute.return_value.scalars.return_value.all.return_value = []

        with patch(TENANT_DIRECTORY_SESSION, _fake_session_factory(mock_session)):
            await SqlTenantDirectory().list_tenants()

        statement = mock_session.execute.call_args.args[0]
        assert "companies.is_active" in str(statement.whereclause)

    @pytest.mark.asyncio
    async def test_list_tenants_failure_is_store_unavailable(self):
        """Test that a listing failure raises StoreUnavailableError."""
        error = OperationalError("SELECT", {}, Exception("down"))
        with patch(TENANT_DIRECTORY_SESSION, _failing_session_factory(error)):
            with pytest.raises(StoreUnavailableError):
                await SqlTenantDirectory().list_tenants()

    @pytest.mark.asyncio
    async def test_load_config_returns_typed_config(self, mock_session):
        """Test that the stored bundle is parsed into a TenantConfig."""
        mock_session.execute.return_value.scalar_one_or_none.return_value = {
            "ADMIN_USERNAME": "root",
            "ADMIN_PASSWORD": "s3cret",
        }

        with patch(TENANT_DIRECTORY_SESSION, _fake_session_factory(mock_session)):
            config = await SqlTenantDirectory().load_config("acme")

        assert config.has_admin_credentials is True

    @pytest.mark.asyncio
    async def test_missing_bundle_is_empty_config(self, mock_session):
        """Test that a tenant without a settings row loads an empty configuration."""
        mock_session.execute.return_value.scalar_one_or_none.return_value = None

        with patch(TENANT_DIRECTORY_SESSION, _fake_session_factory(mock_session)):
            config = await SqlTenantDirectory().load_config("acme")

        assert config == TenantConfig()
        assert config.has_admin_credentials is False

    @pytest.mark.asyncio
    async def test_database_error_raises_load_error(self):
        """Test that query failures raise TenantConfigLoadError."""
        error = OperationalError("SELECT", {}, Exception("down"))
        with patch(TENANT_DIRECTORY_SESSION, _failing_session_factory(error)):
            with pytest.raises(TenantConfigLoadError) as exc_info:
                await SqlTenantDirectory().load_config("acme")

        assert exc_info.value.internal_error is error


class TestUsersSchema:
    """Tests for the users table constraints."""

    def test_username_is_unique_across_tenants(self):
        """Test that uniqueness is on username alone, not per company."""
        assert Users.__table__.c.username.unique is True
        composite = [
            c for c in Users.__table__.constraints
            if isinstance(c, UniqueConstraint) and len(c.columns) > 1
        ]
        assert composite == []

    def test_company_id_references_companies(self):
        """Test that users cannot point at a missing company."""
        targets = {fk.target_fullname for fk in Users.__table__.c.company_id.foreign_keys}

        assert targets == {"companies.id"}
