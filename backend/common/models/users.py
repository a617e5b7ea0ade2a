"""
User models - primary credential store entities.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, Boolean, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from common.database import Base


class Users(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()"))
    company_id: Mapped[str] = mapped_column(String(64), ForeignKey("companies.id", name="fk_users_company"), nullable=False)
    # Unique across all tenants; the login lookup is not tenant-scoped
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    # Opaque credential, compared for exact equality by the auth core
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(50), nullable=False, server_default=text("'user'"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text("true"))
    last_login: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))

    __table_args__ = (
        Index("idx_users_company", "company_id"),
    )
