"""
Legacy Credential Prober

Authenticates identities that predate the credential store by asking each tenant,
in directory order, whether it recognizes the supplied username and password.

Matching Rules (per tenant, first match wins):
    1. Admin pair: when the tenant's configuration bundle defines both
       ``ADMIN_USERNAME`` and ``ADMIN_PASSWORD``, both must match exactly.
    2. Identification number: otherwise, when the username equals the tenant's
       identification number, the password must be one of the fallback
       passwords configured for that tenant.

Bounds:
    - Each configuration load is bounded by ``config_load_timeout`` seconds. A
      failed or timed-out load is logged and the tenant is skipped.
    - The whole probe is bounded by ``probe_timeout`` seconds. Exceeding it ends
      the probe with no match.

Tenants are probed one after another, never in parallel, so directory order
decides which tenant wins when several accept the same credentials.

Example:
    ```python
    prober = LegacyCredentialProber(
        SqlTenantDirectory(),
        fallback_passwords={"acme": ["acme-recovery"]},
    )
    tenant = await prober.probe("admin", "s3cret")
    if tenant is not None:
        print(f"Legacy login matched tenant {tenant.id}")
    ```
"""

import asyncio
from collections.abc import Mapping, Sequence

from loguru import logger

from common.exceptions import (
    AuthErrorCode,
    StoreUnavailableError,
    TenantConfigLoadError,
)
from common.security import credentials_match
from services.auth_service.database import TenantDirectory
from services.auth_service.models import Tenant, TenantConfig

DEFAULT_CONFIG_LOAD_TIMEOUT_SECONDS = 5.0
DEFAULT_PROBE_TIMEOUT_SECONDS = 30.0


class LegacyCredentialProber:
    """
    Sequential, bounded probe of tenant configuration bundles.

    Attributes:
        directory: Source of tenants and their configuration bundles.
        fallback_passwords: Mapping of tenant id to the passwords accepted for a
            login with that tenant's identification number.
        config_load_timeout: Per-tenant bundle load limit, in seconds.
        probe_timeout: Limit for the whole probe, in seconds.
    """

    def __init__(
        self,
        directory: TenantDirectory,
        fallback_passwords: Mapping[str, Sequence[str]] | None = None,
        config_load_timeout: float = DEFAULT_CONFIG_LOAD_TIMEOUT_SECONDS,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
    ) -> None:
        self.directory = directory
        self.fallback_passwords = fallback_passwords if fallback_passwords is not None else {}
        self.config_load_timeout = config_load_timeout
        self.probe_timeout = probe_timeout

    async def probe(self, username: str, password: str) -> Tenant | None:
        """
        Find the first tenant that accepts ``username``/``password``.

        Args:
            username: Supplied username (case-sensitive).
            password: Supplied password (case-sensitive).

        Returns:
            The matching Tenant, or None when no tenant matches, the tenant
            directory is unavailable, or the probe deadline expires.
        """
        try:
            return await asyncio.wait_for(
                self._probe_tenants(username, password), timeout=self.probe_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Legacy probe for {username} exceeded {self.probe_timeout}s, "
                "treating as no match"
            )
            return None

    async def _probe_tenants(self, username: str, password: str) -> Tenant | None:
        try:
            tenants = await self.directory.list_tenants()
        except StoreUnavailableError as e:
            logger.error(
                f"[{e.code.value}] Tenant directory unavailable during legacy probe: "
                f"{e.internal_error or e.message}"
            )
            return None

        for tenant in tenants:
            config = await self._load_config(tenant)
            if config is None:
                continue
            if self._matches(tenant, config, username, password):
                logger.info(f"Legacy credentials for {username} matched tenant {tenant.id}")
                return tenant

        logger.debug(f"No tenant accepted legacy credentials for {username}")
        return None

    async def _load_config(self, tenant: Tenant) -> TenantConfig | None:
        try:
            return await asyncio.wait_for(
                self.directory.load_config(tenant.id),
                timeout=self.config_load_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"[{AuthErrorCode.TENANT_CONFIG_LOAD_FAILED.value}] Loading configuration "
                f"for tenant {tenant.id} timed out after {self.config_load_timeout}s, skipping"
            )
        except TenantConfigLoadError as e:
            logger.warning(
                f"[{e.code.value}] Could not load configuration for tenant {tenant.id}, "
                f"skipping: {e.internal_error or e.message}"
            )
        return None

    def _matches(
        self, tenant: Tenant, config: TenantConfig, username: str, password: str
    ) -> bool:
        if config.has_admin_credentials:
            return credentials_match(username, config.admin_username) and credentials_match(
                password, config.admin_password
            )

        if not tenant.identification_number or not credentials_match(
            username, tenant.identification_number
        ):
            return False

        return any(
            credentials_match(password, candidate)
            for candidate in self.fallback_passwords.get(tenant.id, ())
        )
