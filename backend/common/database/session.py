"""
Async database session management with connection pooling.

The credential store and the tenant directory share one PostgreSQL database
(the login lookup is global across tenants), so every session opened here
targets the database named by POSTGRES_DATABASE unless an explicit database
name is given.

Key Features:
    - Connection pooling with configurable pool sizes
    - Pre-ping enabled for connection validation
    - Engine caching to avoid duplicate connection pools
    - Async context manager with commit/rollback/close handling

Usage:
    ```python
    from common.database import get_async_db_session

    async with get_async_db_session("auth-service") as session:
        result = await session.execute(select(Users).limit(1))
        user = result.scalars().first()
    ```
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import os

from dotenv import load_dotenv
from loguru import logger
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from common.config import get_settings

load_dotenv()

DEFAULT_DATABASE_NAME = "auth"

# Global engine cache to avoid creating multiple engines
_async_engines: dict[str, AsyncEngine] = {}
_session_makers: dict[str, async_sessionmaker[AsyncSession]] = {}


def get_database_name(database_name: str | None = None) -> str:
    """Resolve the target database: explicit name, POSTGRES_DATABASE, or the default."""
    return database_name or os.getenv("POSTGRES_DATABASE") or DEFAULT_DATABASE_NAME


def create_sqlalchemy_url(database_name: str | None = None) -> URL:
    """
    Create an asyncpg SQLAlchemy URL from environment variables.

    Args:
        database_name: Name of the database to connect to. Falls back to
            POSTGRES_DATABASE, then to "auth".

    Returns:
        SQLAlchemy URL object using the postgresql+asyncpg driver.

    Environment Variables:
        - POSTGRES_USER: Database username
        - POSTGRES_PASSWORD: Database password
        - POSTGRES_HOST: Database hostname or IP address (default: localhost)
        - POSTGRES_PORT: Database port (default: 5432)
        - POSTGRES_DATABASE: Database name (default: auth)
    """
    return URL.create(
        drivername="postgresql+asyncpg",
        username=os.getenv("POSTGRES_USER"),
        password=os.getenv("POSTGRES_PASSWORD"),
        host=os.getenv("POSTGRES_HOST", "localhost"),
        port=int(os.getenv("POSTGRES_PORT", "5432")),
        database=get_database_name(database_name),
    )


def get_async_engine(
    service_name: str | None = None, database_name: str | None = None
) -> AsyncEngine:
    """
    Get cached async database engine with connection pooling.

    Args:
        service_name: Name of the service (for logging and the server-side
            application_name).
        database_name: Explicit database name; see get_database_name.

    Returns:
        SQLAlchemy AsyncEngine instance, shared per (service, database) pair.
    """
    resolved_name = get_database_name(database_name)
    cache_key = f"async_{service_name or 'default'}_{resolved_name}"

    if cache_key in _async_engines:
        return _async_engines[cache_key]

    settings = get_settings(service_name)
    pool_size = settings.DATABASE_POOL_SIZE
    max_overflow = settings.DATABASE_MAX_OVERFLOW
    pool_timeout = int(os.getenv("DATABASE_POOL_TIMEOUT", 30))
    pool_recycle = int(os.getenv("DATABASE_POOL_RECYCLE", 3600))

    async_engine = create_async_engine(
        create_sqlalchemy_url(resolved_name),
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
        connect_args={
            "timeout": int(os.getenv("DATABASE_CONNECT_TIMEOUT", 10)),
            "server_settings": {
                "application_name": f"async-{service_name or 'auth-service'}",
                "jit": "off",
            },
        },
    )

    _async_engines[cache_key] = async_engine

    logger.info(
        f"Created async database engine for {service_name or 'default'} "
        f"with pool_size={pool_size}, max_overflow={max_overflow}"
    )

    return async_engine


def get_async_session_maker(
    service_name: str | None = None, database_name: str | None = None
) -> async_sessionmaker[AsyncSession]:
    """Get cached session maker for async operations."""
    cache_key = f"{service_name or 'default'}_{get_database_name(database_name)}"
    if cache_key not in _session_makers:
        _session_makers[cache_key] = async_sessionmaker(
            bind=get_async_engine(service_name, database_name),
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_makers[cache_key]


@asynccontextmanager
async def get_async_db_session(
    service_name: str | None = None, database_name: str | None = None
) -> AsyncIterator[AsyncSession]:
    """
    Async context manager for database sessions with automatic cleanup.

    Args:
        service_name: Optional name of the service (for logging and connection naming).
        database_name: Optional explicit database name.

    Yields:
        SQLAlchemy AsyncSession object ready for async database operations.

    Example:
        ```python
        async with get_async_db_session("auth-service") as session:
            session.add(Users(username="admin", password_hash="...", company_id="acme"))
            # Session automatically commits on successful exit
        ```

    Note:
        - Sessions commit on successful exit and roll back on exceptions
        - Sessions are always closed when exiting the context
        - Errors are logged and re-raised for the caller to classify
    """
    session_maker = get_async_session_maker(service_name, database_name)
    session = session_maker()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"Async database session error: {e}")
        raise
    finally:
        await session.close()


async def dispose_engines() -> None:
    """Dispose every cached engine; used on application shutdown."""
    for engine in _async_engines.values():
        await engine.dispose()
    _async_engines.clear()
    _session_makers.clear()
