"""
Tests for legacy user migration.
"""

from unittest.mock import AsyncMock

import pytest

from common.exceptions import MigrationFailedError, StoreUnavailableError, UsernameTakenError
from services.auth_service.services import migrate_legacy_user


class TestMigrateLegacyUser:
    """Tests for migrate_legacy_user."""

    @pytest.mark.asyncio
    async def test_running_twice_produces_one_row(self, credential_store, make_user):
        """Test that a second migration of the same username is a no-op."""
        user = make_user("root", role="admin")

        first = await migrate_legacy_user(credential_store, user, "s3cret")
        second = await migrate_legacy_user(credential_store, user, "s3cret")

        assert (first, second) == (True, False)
        assert len(credential_store.rows) == 1
        assert credential_store.rows[0].credential == "s3cret"

    @pytest.mark.asyncio
    async def test_existing_username_in_other_tenant_is_not_duplicated(
        self, credential_store, make_user
    ):
        """Test that the collision check is by username alone."""
        credential_store.add(make_user("root", tenant_id="beta", is_active=False), "old")

        migrated = await migrate_legacy_user(
            credential_store, make_user("root", tenant_id="acme"), "s3cret"
        )

        assert migrated is False
        assert len(credential_store.rows) == 1

    @pytest.mark.asyncio
    async def test_insert_race_counts_as_already_migrated(self, credential_store, make_user):
        """Test that losing a concurrent insert is not a failure."""
        credential_store.insert = AsyncMock(side_effect=UsernameTakenError())

        assert await migrate_legacy_user(credential_store, make_user("root"), "s3cret") is False

    @pytest.mark.asyncio
    async def test_store_failure_raises_migration_failed(self, credential_store, make_user):
        """Test that store errors are reported as MigrationFailedError."""
        credential_store.available = False

        with pytest.raises(MigrationFailedError) as exc_info:
            await migrate_legacy_user(credential_store, make_user("root"), "s3cret")

        assert isinstance(exc_info.value.internal_error, StoreUnavailableError)
