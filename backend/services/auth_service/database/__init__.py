"""Persistence adapters for the auth service.

This package provides the credential store, the tenant directory and the local
session storage used by the authentication core.
"""

from .credential_store import CredentialStore, SqlCredentialStore
from .session_storage import (
    SELECTED_TENANT_KEY,
    SESSION_USER_KEY,
    JsonFileSessionStorage,
    SessionStorage,
)
from .tenant_directory import SqlTenantDirectory, TenantDirectory

__all__ = [
    "SELECTED_TENANT_KEY",
    "SESSION_USER_KEY",
    "CredentialStore",
    "JsonFileSessionStorage",
    "SessionStorage",
    "SqlCredentialStore",
    "SqlTenantDirectory",
    "TenantDirectory",
]
