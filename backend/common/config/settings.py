"""
Centralized configuration management for the authentication service.

This module defines Pydantic Settings classes for managing configuration. It
provides a hierarchical settings system with base settings shared by every
service entrypoint and auth-service-specific overrides.

Configuration Loading:
    Settings are loaded in the following priority order (highest to lowest):
    1. Environment variables
    2. .env file in the project root
    3. Default values defined in the classes

Validation:
    All settings are validated using Pydantic validators to ensure:
    - Type correctness
    - Value constraints (e.g., positive timeouts, positive pool sizes)
    - Format requirements (e.g., CORS origins parsing, fallback password mapping)

Service Settings Hierarchy:
    BaseServiceSettings (base class)
    └── AuthServiceSettings

Example:
    ```python
    from common.config.settings import AuthServiceSettings

    settings = AuthServiceSettings()
    print(settings.SERVICE_NAME)  # "auth-service"
    print(settings.DEFAULT_TENANT_ID)  # "innova"
    print(settings.LEGACY_PROBE_TIMEOUT_SECONDS)  # 30.0
    ```

Environment Variables:
    All settings can be overridden via environment variables. For example:
    - LOG_LEVEL=DEBUG
    - SESSION_STATE_PATH=/var/lib/auth/session.json
    - LEGACY_FALLBACK_PASSWORDS='{"innova": ["AutomationBT2023"]}'
"""

from typing import Any

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseServiceSettings(BaseSettings):
    """
    Base settings class providing common configuration for all services.

    Attributes:
        SERVICE_NAME (str): Name identifier for the service. Default: "base-service"
        SERVICE_VERSION (str): Version string for the service. Default: "0.0.1"
        PORT (int): Port number the service listens on. Default: 8000

        ENVIRONMENT (str): Deployment environment. Values: "DEV" or "PROD". Default: "DEV"
        DEBUG (bool): Enable debug mode. Default: False
        LOG_LEVEL (str): Logging level. Default: "INFO"

        API_V1_STR (str): API version prefix for routes. Default: "/api/v1"
        CORS_ORIGINS (list[str]): Allowed CORS origins, comma-separated string or list.

        DATABASE_POOL_SIZE (int): Number of connections to maintain in the pool. Default: 10
        DATABASE_MAX_OVERFLOW (int): Maximum overflow connections beyond pool_size. Default: 5

    Note:
        - PostgreSQL connection parameters are read from POSTGRES_* environment
          variables by common.database.session
        - CORS_ORIGINS can be set as a comma-separated string or a list
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Service Information (defaults)
    SERVICE_NAME: str = "base-service"
    SERVICE_VERSION: str = "0.0.1"
    PORT: int = 8000

    # Global Configuration
    ENVIRONMENT: str = "DEV"  # Can be "DEV" or "PROD"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API Configuration
    API_V1_STR: str = "/api/v1"

    # CORS Configuration
    CORS_ORIGINS: Any = ""

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> list[str]:
        """
        Assemble CORS origins from string or list format.

        Args:
            v: Input value that can be a string, list, or other type.

        Returns:
            List of CORS origin strings with whitespace stripped. Empty list if
            input is empty or invalid.
        """
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, list):
            return v
        return []

    # Database Configuration
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 5

    @field_validator("DATABASE_POOL_SIZE", "DATABASE_MAX_OVERFLOW", mode="before")
    @classmethod
    def validate_positive_int(cls, v: Any, info: ValidationInfo) -> int | None:
        """
        Validate that database pool configuration fields are positive integers.

        Args:
            v: Input value to validate. Can be int, str, or None.
            info: Pydantic ValidationInfo object containing field metadata.

        Returns:
            Validated integer value, or None if input is None.

        Raises:
            ValueError: If the value cannot be converted to an integer or is negative.
        """
        if v is None:
            return None
        try:
            int_val = int(v)
        except (ValueError, TypeError) as e:
            msg = f"{info.field_name} must be a valid positive integer, got: {v}"
            raise ValueError(msg) from e
        if int_val < 0:
            msg = f"{info.field_name} must be a positive integer"
            raise ValueError(msg)
        return int_val


class AuthServiceSettings(BaseServiceSettings):
    """
    Settings configuration for the authentication service.

    Inherited Attributes:
        All attributes from BaseServiceSettings are available with these overrides:
        - SERVICE_NAME: "auth-service"
        - SERVICE_VERSION: "0.1.0"
        - PORT: 8003

    Additional Attributes:
        DEFAULT_TENANT_ID (str): Tenant assigned to a restored session that has no
            tenant linkage and no persisted selected tenant. Default: "innova"
        SESSION_STATE_PATH (str): JSON file holding the persisted session user and
            selected tenant. Default: ".session/auth_state.json"
        TENANT_CONFIG_LOAD_TIMEOUT_SECONDS (float): Upper bound for loading a single
            tenant configuration bundle while probing legacy credentials. Default: 5.0
        LEGACY_PROBE_TIMEOUT_SECONDS (float): Upper bound for a whole legacy probe
            across all tenants. Default: 30.0
        LEGACY_FALLBACK_PASSWORDS (dict[str, list[str]]): Bootstrap passwords per
            tenant id, accepted when the username equals the tenant's identification
            number and the tenant has no admin credentials configured. Set at
            deployment time as a JSON object. Default: {}

    Example:
        ```python
        settings = AuthServiceSettings()
        fallback = settings.LEGACY_FALLBACK_PASSWORDS.get("innova", [])
        ```

    Note:
        - Fallback passwords are legacy bootstrap credentials; prefer configuring
          ADMIN_USERNAME / ADMIN_PASSWORD in the tenant settings instead
        - Timeouts must be strictly positive
    """

    SERVICE_NAME: str = "auth-service"
    SERVICE_VERSION: str = "0.1.0"
    PORT: int = 8003

    # Session Configuration
    DEFAULT_TENANT_ID: str = "innova"
    SESSION_STATE_PATH: str = ".session/auth_state.json"

    # Legacy Credential Probing
    TENANT_CONFIG_LOAD_TIMEOUT_SECONDS: float = 5.0
    LEGACY_PROBE_TIMEOUT_SECONDS: float = 30.0
    LEGACY_FALLBACK_PASSWORDS: dict[str, list[str]] = {}

    @field_validator(
        "TENANT_CONFIG_LOAD_TIMEOUT_SECONDS", "LEGACY_PROBE_TIMEOUT_SECONDS"
    )
    @classmethod
    def validate_positive_timeout(cls, v: float, info: ValidationInfo) -> float:
        """
        Validate that probe timeouts are strictly positive.

        Raises:
            ValueError: If the timeout is zero or negative.
        """
        if v <= 0:
            msg = f"{info.field_name} must be greater than 0"
            raise ValueError(msg)
        return v

    @field_validator("LEGACY_FALLBACK_PASSWORDS", mode="before")
    @classmethod
    def normalize_fallback_passwords(cls, v: Any) -> Any:
        """
        Normalize the fallback password mapping.

        A single password string per tenant is accepted and wrapped in a list,
        so both of these are valid:

            {"innova": "AutomationBT2023"}
            {"innova": ["AutomationBT2023", "OtherBootstrap"]}

        Empty values and None are dropped.
        """
        if v is None:
            return {}
        if isinstance(v, dict):
            normalized: dict[str, list[str]] = {}
            for tenant_id, passwords in v.items():
                if isinstance(passwords, str):
                    passwords = [passwords]
                kept = [p for p in passwords or [] if p]
                if kept:
                    normalized[str(tenant_id)] = kept
            return normalized
        return v
