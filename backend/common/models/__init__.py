"""
Common ORM models for the authentication service.

Tables:
    - Users: Primary credential store (username, opaque credential, tenant, role)
    - Companies: Tenant directory, ordered by is_default then name
    - CompanySettings: Per-tenant key-value configuration bundle

All models inherit from common.database.Base, which provides created_at and
updated_at timestamps.

Usage:
    ```python
    from common.models import Users
    from sqlalchemy import select

    stmt = select(Users).where(Users.username == "admin", Users.is_active.is_(True))
    ```
"""

from .tenants import Companies, CompanySettings
from .users import Users

__all__ = [
    "Companies",
    "CompanySettings",
    "Users",
]
