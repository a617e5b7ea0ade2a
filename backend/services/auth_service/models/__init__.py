"""Domain entities shared by the auth-service layers."""

from .entities import (
    RECOGNIZED_CONFIG_KEYS,
    Session,
    Tenant,
    TenantConfig,
    TenantContext,
    User,
)

__all__ = [
    "RECOGNIZED_CONFIG_KEYS",
    "Session",
    "Tenant",
    "TenantConfig",
    "TenantContext",
    "User",
]
