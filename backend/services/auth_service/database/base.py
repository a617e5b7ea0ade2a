"""
Base Utilities for Auth Service Database Layer

Shared constants used across the auth-service persistence adapters.

Constants:
    SERVICE_NAME: The service name used for database session routing

See Also:
    - services.auth_service.database.credential_store: Primary credential store
    - services.auth_service.database.tenant_directory: Tenant directory
    - common.database: Shared database session management
"""

# Service name constant for database session routing
SERVICE_NAME = "auth-service"
