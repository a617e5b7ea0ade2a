"""
Common utilities and shared code for the tenant-aware authentication backend.

This package provides the shared functionality used by the auth service. It includes:

Modules:
    - config: Centralized configuration management with environment-based settings
    - database: Async database session management and the declarative ORM base
    - exceptions: Authentication error taxonomy and API error responses
    - fastapi: FastAPI application factory with common middleware and configuration
    - logging: Centralized logging configuration using loguru
    - models: ORM models for users, companies and company settings
    - security: Credential comparison helpers

Usage:
    Import specific modules as needed:

    ```python
    from common.config import get_settings
    from common.database import get_async_db_session
    from common.logging import setup_logging
    from common.exceptions import create_api_error
    ```

Version:
    Current version: 0.1.0
"""

__version__ = "0.1.0"
