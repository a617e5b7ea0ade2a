"""
Common FastAPI utilities and middleware.

This module provides shared FastAPI functionality used by the backend services,
including the application factory, middleware, and common route handlers.

Main Components:
    - app_factory: FastAPI application factory with standard configuration

Usage:
    ```python
    from common.fastapi import create_fastapi_app
    from fastapi import APIRouter

    api_router = APIRouter()

    app = create_fastapi_app(
        service_name="auth-service",
        description="Tenant-aware authentication service",
        api_router=api_router,
    )
    ```
"""
from .app_factory import create_fastapi_app

__all__ = ["create_fastapi_app"]
