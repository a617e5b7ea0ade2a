"""
Tenant Directory for Auth Service

Enumerates the known tenants (companies) and loads each tenant's configuration
bundle on demand.

Directory Order:
    Tenants are listed by ``is_default DESC, name ASC``. The order is significant:
    the legacy prober stops at the first matching tenant, so directory order is
    the tie-break policy between tenants that accept the same credentials.

Example:
    ```python
    directory = SqlTenantDirectory()
    for tenant in await directory.list_tenants():
        config = await directory.load_config(tenant.id)
        if config.has_admin_credentials:
            ...
    ```

See Also:
    - common.models.tenants: ORM mappings of companies and company_settings
    - services.auth_service.services.legacy_prober: Main consumer
"""

from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from common.database import get_async_db_session
from common.exceptions import StoreUnavailableError, TenantConfigLoadError
from common.models import Companies, CompanySettings
from services.auth_service.models import Tenant, TenantConfig

from .base import SERVICE_NAME


class TenantDirectory(ABC):
    """Read-only view of the tenants and their configuration bundles."""

    @abstractmethod
    async def list_tenants(self) -> list[Tenant]:
        """Return active tenants in directory order. Inactive companies are never listed."""

    @abstractmethod
    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        """Return a single tenant by id, or None."""

    @abstractmethod
    async def load_config(self, tenant_id: str) -> TenantConfig:
        """
        Load the configuration bundle for a tenant.

        A tenant without a stored bundle gets an empty TenantConfig, so the
        identification-number rule still applies to it.

        Raises:
            TenantConfigLoadError: If the bundle could not be read.
        """


def _to_tenant(row: Companies) -> Tenant:
    return Tenant(
        id=row.id,
        display_name=row.name,
        identification_number=row.identification_number,
        is_default=row.is_default,
    )


class SqlTenantDirectory(TenantDirectory):
    """PostgreSQL-backed tenant directory over ``companies`` and ``company_settings``."""

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        self.service_name = service_name

    async def list_tenants(self) -> list[Tenant]:
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(
                    select(Companies)
                    .where(Companies.is_active.is_(True))
                    .order_by(Companies.is_default.desc(), Companies.name)
                )
                return [_to_tenant(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(
                "Tenant directory is unavailable.", internal_error=e
            ) from e

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        try:
            async with get_async_db_session(self.service_name) as session:
                row = await session.get(Companies, tenant_id)
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(
                "Tenant directory is unavailable.", internal_error=e
            ) from e
        return _to_tenant(row) if row is not None else None

    async def load_config(self, tenant_id: str) -> TenantConfig:
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(
                    select(CompanySettings.settings).where(
                        CompanySettings.company_id == tenant_id
                    )
                )
                bundle = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise TenantConfigLoadError(internal_error=e) from e

        if bundle is None:
            return TenantConfig()
        return TenantConfig.from_bundle(bundle, tenant_id=tenant_id)
