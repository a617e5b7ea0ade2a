"""
Common database utilities and session management.

This module provides the database abstraction layer for the authentication
service: the declarative ORM base and async session handling for the shared
credential database.

Main Components:
    - Base: SQLAlchemy declarative base class for all ORM models
    - session: Async engine, session maker and session context manager

Usage:
    ```python
    from common.database import get_async_db_session

    async with get_async_db_session("auth-service") as session:
        result = await session.execute(select(Users))
    ```
"""

from .base import Base
from .session import (
    create_sqlalchemy_url,
    dispose_engines,
    get_async_db_session,
    get_async_engine,
    get_async_session_maker,
    get_database_name,
)

__all__ = [
    "Base",
    "create_sqlalchemy_url",
    "dispose_engines",
    "get_async_db_session",
    "get_async_engine",
    "get_async_session_maker",
    "get_database_name",
]
