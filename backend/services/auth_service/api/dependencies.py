"""
Shared API dependencies for the auth service.
"""

from functools import lru_cache

from common.config import get_settings
from services.auth_service.database import (
    JsonFileSessionStorage,
    SqlCredentialStore,
    SqlTenantDirectory,
)
from services.auth_service.services import (
    Authenticator,
    LegacyCredentialProber,
    SessionManager,
)


@lru_cache(maxsize=1)
def get_authenticator() -> Authenticator:
    """
    Get cached authenticator instance.
    Using lru_cache to ensure only one instance (and one session) exists.
    """
    settings = get_settings("auth-service")
    tenant_directory = SqlTenantDirectory()

    return Authenticator(
        credential_store=SqlCredentialStore(),
        tenant_directory=tenant_directory,
        session_manager=SessionManager(
            JsonFileSessionStorage(settings.SESSION_STATE_PATH),
            default_tenant_id=settings.DEFAULT_TENANT_ID,
        ),
        legacy_prober=LegacyCredentialProber(
            tenant_directory,
            fallback_passwords=settings.LEGACY_FALLBACK_PASSWORDS,
            config_load_timeout=settings.TENANT_CONFIG_LOAD_TIMEOUT_SECONDS,
            probe_timeout=settings.LEGACY_PROBE_TIMEOUT_SECONDS,
        ),
    )
