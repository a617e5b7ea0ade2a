"""
Centralized configuration management for the authentication service.

This module provides a unified interface for accessing service-specific configuration
settings. It selects the appropriate settings class based on the service name.

The configuration system uses Pydantic Settings, which automatically loads values from:
    1. Environment variables (highest priority)
    2. .env file in the project root
    3. Default values defined in the settings classes

Service-Specific Settings:
    - AuthServiceSettings: Configuration for auth-service
    - BaseServiceSettings: Base configuration shared by all services

Example:
    ```python
    from common.config import get_settings

    settings = get_settings("auth-service")
    print(settings.SERVICE_NAME)  # "auth-service"
    print(settings.PORT)  # 8003
    ```
"""

from common.config.settings import (
    AuthServiceSettings,
    BaseServiceSettings,
)


def get_settings(service_name: str | None = None) -> BaseServiceSettings:
    """
    Get settings instance for the specified service.

    Performs fuzzy matching on the service name, so "auth" matches "auth-service".

    Args:
        service_name: Name of the service to get settings for. Any string
            containing "auth" returns AuthServiceSettings; None or any other
            value returns BaseServiceSettings.

    Returns:
        Instance of the appropriate settings class.

    Example:
        ```python
        settings = get_settings("auth-service")  # AuthServiceSettings
        settings = get_settings("auth")  # AuthServiceSettings
        settings = get_settings()  # BaseServiceSettings
        ```

    Note:
        - Settings are loaded from environment variables and .env file
        - Each call returns a new instance (settings are not cached)
        - Service name matching is case-insensitive
    """
    if service_name:
        service_lower = service_name.lower()
        if service_lower == "auth-service" or "auth" in service_lower:
            return AuthServiceSettings()
    # Default to base settings
    return BaseServiceSettings()


__all__ = [
    "AuthServiceSettings",
    "BaseServiceSettings",
    "get_settings",
]
