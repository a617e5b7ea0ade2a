"""
Authentication Service - FastAPI Application Entrypoint

This module serves as the main entry point for the Authentication Service, a
microservice responsible for tenant-aware username/password authentication.

The service authenticates against the credential store first and falls back to
legacy per-tenant credentials for identities that predate it, migrating those
identities into the credential store in the background. It provides RESTful
APIs for:

- Login (credential store, then legacy tenant credentials)
- Logout and current-session reads
- Self-registration

Architecture:
    The service follows a microservices pattern with clear separation of concerns:
    - API Layer: FastAPI endpoints handling HTTP requests/responses
    - Service Layer: Authenticator, legacy prober, migration, session manager
    - Database Layer: Credential store and tenant directory (via common.database)

Example:
    To run the service locally:
        ```bash
        uvicorn services.auth_service:app --port 8003 --reload
        ```

    The service will be available at:
        - API Base: http://localhost:8003/api/v1/auth
        - Swagger UI: http://localhost:8003/docs
        - Health Check: http://localhost:8003/health

Attributes:
    app (FastAPI): The FastAPI application instance configured with:
        - Service name: "auth-service"
        - Root path: "/auth" (for reverse proxy routing)
        - API router: Includes all v1 authentication endpoints
        - Shutdown hooks: drain pending migrations, dispose database engines

See Also:
    - services.auth_service.api.v1.api: API router definitions
    - services.auth_service.services.authenticator: Core authentication logic
    - common.fastapi.app_factory: FastAPI application factory
"""

from common.database import dispose_engines
from common.fastapi import create_fastapi_app
from services.auth_service.api.dependencies import get_authenticator
from services.auth_service.api.v1.api import api_router


async def drain_pending_migrations() -> None:
    await get_authenticator().drain_background_tasks()


# The root_path="/auth" ensures proper routing when behind Nginx reverse proxy
# In development (ENVIRONMENT=DEV), root_path is automatically set to ""
app = create_fastapi_app(
    service_name="auth-service",
    description="Tenant-aware authentication service with legacy credential migration",
    api_router=api_router,
    root_path="/auth",
    shutdown_hooks=[drain_pending_migrations, dispose_engines],
)
