"""
Auth Database Initialization Script.

This module provides a command-line utility for creating the auth-service schema
(``companies``, ``company_settings`` and ``users``) and, optionally, registering
a tenant.

**Primary Use Cases:**
    1. Schema creation for a fresh development or test database
    2. Registering the default tenant before the first login
    3. Recovery scenarios where tables were dropped

**Dependencies:**
    - PostgreSQL database server (local or Cloud SQL)
    - Environment variables: POSTGRES_HOST, POSTGRES_PORT, POSTGRES_USER,
      POSTGRES_PASSWORD, POSTGRES_DATABASE

**Example Usage:**
    ```bash
    # Create tables only
    python scripts/init_db.py

    # Create tables and register a default tenant
    python scripts/init_db.py innova "Innova" 900123456
    ```

**Error Handling:**
    - Exits with code 0 on success
    - Exits with code 1 on failure (database connection, SQL errors, etc.)
    - All errors are logged to both console and logs/init_db.log
"""

import asyncio
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

# Add the project's root directory to the Python path
sys.path.append(str(Path(__file__).parent.parent.resolve()))

from common.database import Base, dispose_engines, get_async_db_session, get_async_engine
from common.models import Companies, CompanySettings

SERVICE_NAME = "auth-service"


async def create_schema() -> None:
    """Create all auth tables that do not exist yet."""
    engine = get_async_engine(SERVICE_NAME)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"✓ Schema ready: {', '.join(sorted(Base.metadata.tables))}")


async def register_tenant(
    tenant_id: str, name: str, identification_number: str | None = None
) -> None:
    """
    Insert a tenant as the default company with an empty configuration bundle.

    An existing tenant with the same id is left unchanged.
    """
    async with get_async_db_session(SERVICE_NAME) as session:
        if await session.get(Companies, tenant_id) is not None:
            logger.info(f"Tenant {tenant_id} already exists, skipping")
            return
        session.add(
            Companies(
                id=tenant_id,
                name=name,
                identification_number=identification_number,
                is_default=True,
            )
        )
        await session.flush()
        session.add(CompanySettings(company_id=tenant_id, settings={}))
    logger.info(f"✓ Registered tenant {tenant_id} ({name})")


async def main() -> None:
    """
    Main entry point for auth database initialization.

    **Command Line Arguments:**
        - tenant_id (optional): Id of a tenant to register as default
        - tenant_name (required with tenant_id): Display name of the tenant
        - identification_number (optional): Legacy login identification number
    """
    args = sys.argv[1:]
    if len(args) == 1:
        logger.info(f"Usage: python {sys.argv[0]} [tenant_id tenant_name [identification_number]]")
        sys.exit(1)

    try:
        await create_schema()
        if args:
            await register_tenant(args[0], args[1], args[2] if len(args) > 2 else None)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"✗ Error during initialization: {e}")
        sys.exit(1)
    finally:
        await dispose_engines()


if __name__ == "__main__":
    logger.add("logs/init_db.log", rotation="500 MB")

    asyncio.run(main())
