"""
Legacy user migration.

Copies an identity that authenticated through the legacy prober into the
credential store, so the next login for that username takes the primary path.
"""

from loguru import logger

from common.exceptions import MigrationFailedError, UsernameTakenError
from services.auth_service.database import CredentialStore
from services.auth_service.models import User


async def migrate_legacy_user(store: CredentialStore, user: User, credential: str) -> bool:
    """
    Insert a legacy-authenticated user unless the username already exists.

    Running this for every legacy login is safe: an existing username is left
    untouched, and losing an insert race against a concurrent migration counts as
    already migrated.

    Args:
        store: Credential store to write into.
        user: Synthesized user (role ``admin``, tenant from the matching tenant).
        credential: The password that authenticated the legacy login.

    Returns:
        True if a row was inserted, False if the username was already present.

    Raises:
        MigrationFailedError: If the credential store could not be written.
    """
    try:
        if await store.username_exists(user.username):
            logger.debug(f"User {user.username} already in credential store, skipping migration")
            return False
        await store.insert(user, credential)
    except UsernameTakenError:
        logger.debug(f"User {user.username} was migrated concurrently")
        return False
    except Exception as e:
        raise MigrationFailedError(internal_error=e) from e

    logger.info(f"Migrated legacy user {user.username} into tenant {user.tenant_id}")
    return True
