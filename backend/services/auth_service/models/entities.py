"""
Domain entities for the authentication core.

These pydantic models are the values passed between the credential store, the
tenant directory, the legacy prober, the session manager and the authenticator.
They are independent of the ORM rows in common.models and of the HTTP request
and response models in api.v1.models.

Entities:
    - User: A tenant-scoped identity. The opaque credential is never serialized.
    - Tenant: A company known to the tenant directory.
    - TenantConfig: Typed view of a tenant's key-value configuration bundle.
    - TenantContext: The explicitly passed "active tenant" (tenant + config).
    - Session: The single authenticated identity of the running process.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

# Bundle key -> TenantConfig field
RECOGNIZED_CONFIG_KEYS: dict[str, str] = {
    "ADMIN_USERNAME": "admin_username",
    "ADMIN_PASSWORD": "admin_password",
    "EMAIL": "email",
}


class User(BaseModel):
    """
    A tenant-scoped identity.

    ``credential`` holds the opaque stored password when the user was read from
    the credential store. It is excluded from ``model_dump``/``model_dump_json``
    so it never reaches persisted session state or API responses.
    """

    id: str
    username: str
    credential: str | None = Field(default=None, exclude=True, repr=False)
    email: str | None = None
    tenant_id: str | None = None
    role: str = "user"
    is_active: bool = True
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Tenant(BaseModel):
    """A company/organization; identification_number is the legacy login key."""

    id: str
    display_name: str
    identification_number: str | None = None
    is_default: bool = False


class TenantConfig(BaseModel):
    """
    Typed configuration bundle for a tenant.

    Only ``ADMIN_USERNAME``, ``ADMIN_PASSWORD`` and ``EMAIL`` are recognized.
    Empty values count as absent, matching how the legacy bundles were read.
    """

    admin_username: str | None = None
    admin_password: str | None = Field(default=None, repr=False)
    email: str | None = None

    @property
    def has_admin_credentials(self) -> bool:
        return bool(self.admin_username and self.admin_password)

    @classmethod
    def from_bundle(
        cls, bundle: Mapping[str, Any] | None, tenant_id: str | None = None
    ) -> TenantConfig:
        """
        Build a TenantConfig from a raw key-value bundle.

        Unrecognized keys are ignored; a single warning lists them so that
        misspelled keys (e.g. ``ADMIN_USER``) are visible in the logs.

        Args:
            bundle: Raw settings mapping as stored for the tenant. None is
                treated as an empty bundle.
            tenant_id: Used only for log context.

        Returns:
            TenantConfig with recognized values coerced to non-empty strings.
        """
        values: dict[str, str] = {}
        ignored: list[str] = []
        for key, raw_value in (bundle or {}).items():
            field_name = RECOGNIZED_CONFIG_KEYS.get(key)
            if field_name is None:
                ignored.append(str(key))
                continue
            if raw_value is None:
                continue
            value = str(raw_value)
            if value:
                values[field_name] = value

        if ignored:
            logger.warning(
                f"Ignoring unrecognized configuration keys for tenant "
                f"{tenant_id or '<unknown>'}: {', '.join(sorted(ignored))}"
            )
        return cls(**values)


class TenantContext(BaseModel):
    """The selected tenant and its loaded configuration."""

    tenant_id: str
    tenant: Tenant | None = None
    config: TenantConfig = Field(default_factory=TenantConfig)


class Session(BaseModel):
    """The process's current authenticated identity."""

    user: User

    @property
    def tenant_id(self) -> str | None:
        return self.user.tenant_id
