"""
Authenticator - Core Business Logic

This module implements the login state machine of the auth service, together
with logout, session reads, self-registration and tenant selection.

Login Flow:
    1. Look up one active user with the exact username in the credential store.
       An unavailable store is logged and treated as "not found".
    2. Found: compare the password exactly. A mismatch is rejected and never
       falls through to the legacy path.
    3. Not found: ask the legacy prober. A matching tenant yields a synthesized
       admin user, and a background task migrates that user into the credential
       store. Migration failures are logged and never change the login result.
    4. Success: select the user's tenant (loading its configuration bundle),
       stamp the last login on the primary path, and commit the session.

The service layer sits between the FastAPI endpoints
(services.auth_service.api.v1.endpoints) and the persistence adapters
(services.auth_service.database).

Example:
    ```python
    authenticator = Authenticator(
        credential_store=SqlCredentialStore(),
        tenant_directory=SqlTenantDirectory(),
        session_manager=SessionManager(storage, default_tenant_id="innova"),
        legacy_prober=LegacyCredentialProber(SqlTenantDirectory()),
    )

    session = await authenticator.login("admin", "s3cret")
    print(session.user.tenant_id, authenticator.active_tenant.config.email)

    await authenticator.logout()
    ```
"""

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import uuid4

from loguru import logger

from common.exceptions import (
    InvalidCredentialsError,
    LoginFailedError,
    MigrationFailedError,
    StoreUnavailableError,
    TenantConfigLoadError,
    UnknownTenantError,
    UsernameTakenError,
)
from common.security import credentials_match
from services.auth_service.database import CredentialStore, TenantDirectory
from services.auth_service.models import (
    Session,
    Tenant,
    TenantConfig,
    TenantContext,
    User,
)

from .legacy_prober import LegacyCredentialProber
from .migration import migrate_legacy_user
from .session_manager import SessionManager

LEGACY_USER_ROLE = "admin"
DEFAULT_USER_ROLE = "user"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Authenticator:
    """
    Tenant-aware authenticator with a legacy fallback path.

    One instance serves the whole process: it owns the single session (through
    the session manager) and the active tenant context. Callers are expected to
    serialize logins; the last committed login wins.

    Attributes:
        credential_store: Primary store of user credentials.
        tenant_directory: Source of tenants and configuration bundles.
        session_manager: Holder of the current session.
        legacy_prober: Fallback authenticator for pre-migration identities.

    Note:
        Migrations run as detached asyncio tasks. Call
        ``drain_background_tasks()`` before shutting the event loop down.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        tenant_directory: TenantDirectory,
        session_manager: SessionManager,
        legacy_prober: LegacyCredentialProber,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.credential_store = credential_store
        self.tenant_directory = tenant_directory
        self.session_manager = session_manager
        self.legacy_prober = legacy_prober
        self._now = now
        self._active_tenant: TenantContext | None = None
        self._background_tasks: set[asyncio.Task] = set()

    @property
    def active_tenant(self) -> TenantContext | None:
        """The tenant selected by the last successful login, if any."""
        return self._active_tenant

    async def login(self, username: str, password: str) -> Session:
        """
        Authenticate ``username``/``password`` and start a session.

        Args:
            username: Exact, case-sensitive username.
            password: Exact, case-sensitive password.

        Returns:
            Session: The committed session. ``session.user.tenant_id`` is never empty.

        Raises:
            InvalidCredentialsError: Unknown username everywhere, or wrong password
                for a user of the credential store.
            LoginFailedError: Any unexpected failure. The cause is logged, never
                exposed.

        Example:
            ```python
            try:
                session = await authenticator.login("admin", "s3cret")
            except InvalidCredentialsError as e:
                print(e.message)
            ```
        """
        try:
            return await self._login(username, password)
        except InvalidCredentialsError:
            raise
        except Exception as e:
            logger.opt(exception=e).error(f"Unexpected error during login for {username}")
            raise LoginFailedError(internal_error=e) from e

    async def _login(self, username: str, password: str) -> Session:
        stored_user = await self._find_primary_user(username)

        if stored_user is not None:
            if not credentials_match(password, stored_user.credential):
                logger.info(f"Login rejected for {username}: credential mismatch")
                raise InvalidCredentialsError()
            return await self._complete_primary_login(stored_user)

        tenant = await self.legacy_prober.probe(username, password)
        if tenant is None:
            logger.info(f"Login rejected for {username}: no matching identity")
            raise InvalidCredentialsError()
        return await self._complete_legacy_login(username, password, tenant)

    async def _find_primary_user(self, username: str) -> User | None:
        try:
            return await self.credential_store.find_active_by_username(username)
        except StoreUnavailableError as e:
            logger.warning(
                f"[{e.code.value}] Credential store lookup failed for {username}, "
                f"trying legacy path: {e.internal_error or e.message}"
            )
            return None

    async def _complete_primary_login(self, user: User) -> Session:
        now = self._now()
        if user.tenant_id:
            await self.select_tenant(user.tenant_id)

        try:
            await self.credential_store.touch_last_login(user.id, now)
        except StoreUnavailableError as e:
            logger.warning(
                f"[{e.code.value}] Could not record last login for {user.username}: "
                f"{e.internal_error or e.message}"
            )

        session = self.session_manager.commit(user.model_copy(update={"last_login_at": now}))
        logger.info(f"User {user.username} logged in (tenant {session.tenant_id})")
        return session

    async def _complete_legacy_login(
        self, username: str, password: str, tenant: Tenant
    ) -> Session:
        context = await self.select_tenant(tenant.id)
        user = User(
            id=str(uuid4()),
            username=username,
            email=context.config.email,
            tenant_id=tenant.id,
            role=LEGACY_USER_ROLE,
            is_active=True,
            last_login_at=self._now(),
        )
        self._schedule_migration(user, password)

        session = self.session_manager.commit(user)
        logger.info(f"User {username} logged in through legacy tenant {tenant.id}")
        return session

    async def select_tenant(self, tenant_id: str) -> TenantContext:
        """
        Make ``tenant_id`` the active tenant and load its configuration bundle.

        A tenant whose details or bundle cannot be loaded is still selected, with
        an empty configuration; the failure is logged.

        Args:
            tenant_id: Id of the tenant to select.

        Returns:
            TenantContext: The new active tenant context.
        """
        tenant: Tenant | None = None
        config = TenantConfig()
        try:
            tenant = await self.tenant_directory.get_tenant(tenant_id)
            config = await self.tenant_directory.load_config(tenant_id)
        except (StoreUnavailableError, TenantConfigLoadError) as e:
            logger.warning(
                f"[{e.code.value}] Selected tenant {tenant_id} without configuration: "
                f"{e.internal_error or e.message}"
            )

        self.session_manager.remember_tenant(tenant_id)
        self._active_tenant = TenantContext(tenant_id=tenant_id, tenant=tenant, config=config)
        return self._active_tenant

    async def logout(self) -> None:
        """End the current session and forget the active tenant context."""
        user = self.session_manager.peek()
        self.session_manager.clear()
        self._active_tenant = None
        if user is not None:
            logger.info(f"User {user.username} logged out")

    def get_current_session(self) -> Session | None:
        """Return the current session, repairing its tenant linkage if needed."""
        user = self.session_manager.current()
        return Session(user=user) if user is not None else None

    def is_authenticated(self) -> bool:
        return self.get_current_session() is not None

    async def register(
        self,
        username: str,
        password: str,
        tenant_id: str,
        email: str | None = None,
        role: str = DEFAULT_USER_ROLE,
        is_active: bool = True,
    ) -> User:
        """
        Create a new user in the credential store.

        Args:
            username: Desired username. Must not exist in any tenant.
            password: Credential to store.
            tenant_id: Tenant the user belongs to. Must exist in the directory.
            email: Optional contact address.
            role: Role name, ``"user"`` by default.
            is_active: Whether the user may log in.

        Returns:
            User: The stored user.

        Raises:
            UsernameTakenError: If the username is already in use.
            UnknownTenantError: If tenant_id names no known tenant.
            StoreUnavailableError: If the credential store could not be reached.
        """
        if await self.credential_store.username_exists(username):
            raise UsernameTakenError()
        if await self.tenant_directory.get_tenant(tenant_id) is None:
            raise UnknownTenantError()

        user = User(
            id=str(uuid4()),
            username=username,
            email=email,
            tenant_id=tenant_id,
            role=role,
            is_active=is_active,
        )
        stored = await self.credential_store.insert(user, password)
        logger.info(f"Registered user {username} in tenant {tenant_id}")
        return stored

    def _schedule_migration(self, user: User, credential: str) -> None:
        task = asyncio.create_task(
            self._migrate(user, credential), name=f"migrate-{user.username}"
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _migrate(self, user: User, credential: str) -> None:
        try:
            await migrate_legacy_user(self.credential_store, user, credential)
        except MigrationFailedError as e:
            logger.opt(exception=e.internal_error).error(
                f"[{e.code.value}] Could not migrate legacy user {user.username}"
            )

    async def drain_background_tasks(self) -> None:
        """Wait for all pending migrations to finish."""
        pending = list(self._background_tasks)
        if pending:
            logger.debug(f"Waiting for {len(pending)} background migration(s)")
            await asyncio.gather(*pending, return_exceptions=True)
