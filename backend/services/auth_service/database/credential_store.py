"""
Credential Store for Auth Service

The primary, authoritative store of user credentials: the ``users`` table.
Lookups are exact-match and case-sensitive on ``username``. Usernames are
unique across all tenants, so the login lookup needs no tenant filter and
resolves to at most one row.

Error Mapping:
    - Connection, driver and SQLAlchemy errors -> StoreUnavailableError
    - Foreign key violations on insert -> UnknownTenantError
    - Other integrity violations on insert -> UsernameTakenError

Example:
    ```python
    store = SqlCredentialStore()
    user = await store.find_active_by_username("admin")
    if user and user.credential == supplied_password:
        await store.touch_last_login(user.id, datetime.now(timezone.utc))
    ```

See Also:
    - common.models.users.Users: ORM mapping of the users table
    - services.auth_service.services.authenticator: Main consumer
"""

from abc import ABC, abstractmethod
from datetime import datetime

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from common.database import get_async_db_session
from common.exceptions import StoreUnavailableError, UnknownTenantError, UsernameTakenError
from common.models import Users
from services.auth_service.models import User

from .base import SERVICE_NAME

# PostgreSQL SQLSTATE for foreign_key_violation
FOREIGN_KEY_VIOLATION = "23503"


class CredentialStore(ABC):
    """Abstract persistence interface for tenant-scoped user records."""

    @abstractmethod
    async def find_active_by_username(self, username: str) -> User | None:
        """Return the first active user with exactly this username, or None."""

    @abstractmethod
    async def username_exists(self, username: str) -> bool:
        """Return True if any user (active or not) has this username."""

    @abstractmethod
    async def insert(self, user: User, credential: str) -> User:
        """Persist ``user`` with ``credential`` and return the stored record."""

    @abstractmethod
    async def touch_last_login(self, user_id: str, at: datetime) -> None:
        """Stamp the user's last login time."""


def _sqlstate(error: IntegrityError) -> str | None:
    return getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)


def _to_user(row: Users) -> User:
    return User(
        id=str(row.id),
        username=row.username,
        credential=row.password_hash,
        email=row.email,
        tenant_id=row.company_id,
        role=row.role,
        is_active=row.is_active,
        last_login_at=row.last_login,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlCredentialStore(CredentialStore):
    """
    PostgreSQL-backed credential store.

    Each method opens its own session from the shared pool, so one instance can
    be reused across requests.
    """

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        self.service_name = service_name

    async def find_active_by_username(self, username: str) -> User | None:
        """
        Look up one active user by exact username.

        Raises:
            StoreUnavailableError: If the database could not be queried.
        """
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(
                    select(Users)
                    .where(Users.username == username, Users.is_active.is_(True))
                    .limit(1)
                )
                row = result.scalars().first()
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(internal_error=e) from e

        return _to_user(row) if row is not None else None

    async def username_exists(self, username: str) -> bool:
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(
                    select(Users.id).where(Users.username == username).limit(1)
                )
                return result.first() is not None
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(internal_error=e) from e

    async def insert(self, user: User, credential: str) -> User:
        """
        Insert a user row.

        Args:
            user: The user to persist. ``tenant_id`` is required.
            credential: Opaque credential stored in ``password_hash``.

        Returns:
            The stored user, including server-generated timestamps.

        Raises:
            UsernameTakenError: If the username already exists.
            UnknownTenantError: If the tenant_id does not reference a company.
            StoreUnavailableError: For any other database failure.
        """
        if not user.tenant_id:
            msg = "Cannot store a user without a tenant_id"
            raise ValueError(msg)

        row = Users(
            id=user.id,
            username=user.username,
            password_hash=credential,
            email=user.email,
            company_id=user.tenant_id,
            role=user.role,
            is_active=user.is_active,
            last_login=user.last_login_at,
        )
        try:
            async with get_async_db_session(self.service_name) as session:
                session.add(row)
                await session.flush()
                await session.refresh(row)
        except IntegrityError as e:
            if _sqlstate(e) == FOREIGN_KEY_VIOLATION:
                raise UnknownTenantError(internal_error=e) from e
            raise UsernameTakenError(internal_error=e) from e
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(internal_error=e) from e

        logger.info(f"Stored user {user.username} for tenant {user.tenant_id}")
        return _to_user(row)

    async def touch_last_login(self, user_id: str, at: datetime) -> None:
        try:
            async with get_async_db_session(self.service_name) as session:
                await session.execute(
                    update(Users).where(Users.id == user_id).values(last_login=at)
                )
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(internal_error=e) from e
