"""
Authentication Service Business Logic Package

This package contains the core business logic for the authentication service:
the login state machine, the legacy credential prober, legacy user migration and
the session manager.

Modules:
    - authenticator.py: Authenticator (login, logout, sessions, registration)
    - legacy_prober.py: LegacyCredentialProber for pre-migration identities
    - migration.py: migrate_legacy_user
    - session_manager.py: SessionManager with repair-on-read

The service layer is independent of the API layer and can be used by other
services or scripts that need authentication functionality.
"""

from .authenticator import Authenticator
from .legacy_prober import LegacyCredentialProber
from .migration import migrate_legacy_user
from .session_manager import SessionManager

__all__ = [
    "Authenticator",
    "LegacyCredentialProber",
    "SessionManager",
    "migrate_legacy_user",
]
