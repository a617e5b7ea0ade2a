"""
Base declarative class for all ORM models.

Every table used by the authentication core (users, companies, company_settings)
derives from this base and inherits the created_at/updated_at audit columns.

Usage:
    ```python
    from common.database import Base
    from sqlalchemy.orm import Mapped, mapped_column
    from sqlalchemy import String

    class Companies(Base):
        __tablename__ = "companies"

        id: Mapped[str] = mapped_column(String(64), primary_key=True)
        name: Mapped[str] = mapped_column(String(255))
    ```

Note:
    - Table names default to the lowercase class name; models may set
      __tablename__ explicitly to match an existing schema
    - Timestamps use TIMESTAMP WITH TIME ZONE with server-side NOW() defaults
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import TIMESTAMP, text
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """
    Base declarative class for all SQLAlchemy ORM models.

    Attributes:
        created_at (Mapped[datetime]): Row creation time, set by the server.
        updated_at (Mapped[datetime]): Last update time, set by the server on
            insert and refreshed by SQLAlchemy on ORM updates.
    """

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()"), onupdate=text("NOW()")
    )

    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        """Default table name: the lowercase class name."""
        return cls.__name__.lower()
