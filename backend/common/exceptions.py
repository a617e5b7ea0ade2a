"""
Standardized error handling for the authentication core and its API responses.

This module defines the authentication error taxonomy used by the auth-service
business logic, plus helpers that convert errors into SOC2-compliant HTTP
responses without exposing internal server details to clients.

Error Taxonomy:
    - StoreUnavailableError: The credential store could not be reached. Recovered
      locally by the login flow (falls through to the legacy path).
    - InvalidCredentialsError: Unknown username or wrong password. The only
      login failure that reaches the caller.
    - MigrationFailedError: Writing a legacy identity into the credential store
      failed. Logged only, never surfaced.
    - TenantConfigLoadError: A tenant configuration bundle failed to load while
      probing. The tenant is skipped.
    - UsernameTakenError: A registration or insert collided with an existing username.
    - UnknownTenantError: A registration referenced a tenant that does not exist.
    - LoginFailedError: Wraps any unexpected exception raised during login so that
      internal causes never leak to the caller.

Architecture:
    The module uses a two-tier error handling approach:
    1. Internal errors are logged with full details for debugging
    2. User-facing errors contain only safe, generic messages

Example:
    ```python
    from common.exceptions import InvalidCredentialsError, create_api_error

    try:
        session = await authenticator.login(username, password)
    except InvalidCredentialsError as e:
        raise create_api_error(
            operation="logging in",
            status_code=401,
            user_message=e.message,
        )
    ```
"""

from enum import Enum

from fastapi import HTTPException
from loguru import logger

# HTTP Status Code Constants
HTTP_400_BAD_REQUEST = 400
HTTP_401_UNAUTHORIZED = 401
HTTP_403_FORBIDDEN = 403
HTTP_404_NOT_FOUND = 404
HTTP_409_CONFLICT = 409
HTTP_422_UNPROCESSABLE_ENTITY = 422
HTTP_500_INTERNAL_SERVER_ERROR = 500
HTTP_503_SERVICE_UNAVAILABLE = 503

INVALID_CREDENTIALS_MESSAGE = (
    "Invalid credentials. Please check your username and password."
)
LOGIN_FAILED_MESSAGE = (
    "An error occurred while logging in. Please try again later."
)


class AuthErrorCode(str, Enum):
    """Machine-readable codes carried by every AuthError."""

    STORE_UNAVAILABLE = "store_unavailable"
    INVALID_CREDENTIALS = "invalid_credentials"
    MIGRATION_FAILED = "migration_failed"
    TENANT_CONFIG_LOAD_FAILED = "tenant_config_load_failed"
    USERNAME_TAKEN = "username_taken"
    UNKNOWN_TENANT = "unknown_tenant"
    LOGIN_FAILED = "login_failed"


class AuthError(Exception):
    """
    Base exception for the authentication core.

    Separates the user-facing message from the internal cause, mirroring the
    API error handling of the HTTP layer: ``message`` can be shown to a caller,
    ``internal_error`` is only ever logged.

    Attributes:
        code (AuthErrorCode): Machine-readable error code.
        message (str): Message that is safe to expose to callers.
        internal_error (Exception | None): The original exception, for logging only.
    """

    code: AuthErrorCode = AuthErrorCode.LOGIN_FAILED
    default_message: str = LOGIN_FAILED_MESSAGE

    def __init__(
        self,
        message: str | None = None,
        internal_error: Exception | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.internal_error = internal_error
        super().__init__(self.message)


class StoreUnavailableError(AuthError):
    """The credential store (or tenant directory) could not be reached."""

    code = AuthErrorCode.STORE_UNAVAILABLE
    default_message = "Credential store is unavailable."


class InvalidCredentialsError(AuthError):
    """Username unknown everywhere, or wrong password for a known user."""

    code = AuthErrorCode.INVALID_CREDENTIALS
    default_message = INVALID_CREDENTIALS_MESSAGE


class MigrationFailedError(AuthError):
    """A legacy-authenticated identity could not be written to the credential store."""

    code = AuthErrorCode.MIGRATION_FAILED
    default_message = "Failed to migrate legacy user."


class TenantConfigLoadError(AuthError):
    """A tenant configuration bundle could not be loaded."""

    code = AuthErrorCode.TENANT_CONFIG_LOAD_FAILED
    default_message = "Failed to load tenant configuration."


class UsernameTakenError(AuthError):
    """The username already exists in the credential store."""

    code = AuthErrorCode.USERNAME_TAKEN
    default_message = "Username is already in use."


class UnknownTenantError(AuthError):
    """The referenced tenant does not exist in the tenant directory."""

    code = AuthErrorCode.UNKNOWN_TENANT
    default_message = "Unknown tenant."


class LoginFailedError(AuthError):
    """An unexpected error interrupted the login flow."""

    code = AuthErrorCode.LOGIN_FAILED
    default_message = LOGIN_FAILED_MESSAGE


def create_api_error(
    operation: str,
    status_code: int = 500,
    internal_error: Exception | None = None,
    user_message: str | None = None,
) -> HTTPException:
    """
    Create a standardized API error response with SOC2-compliant error messages.

    This function creates a FastAPI HTTPException with a user-friendly error message
    while logging the full internal error details for debugging. It ensures that
    sensitive information is never exposed to API clients.

    Args:
        operation: Description of the operation that failed (e.g., "logging in",
            "registering user"). Used for logging context.
        status_code: HTTP status code to return. Defaults to 500 (Internal Server Error).
            Common values:
                - 400: Bad Request (invalid input)
                - 401: Unauthorized (authentication failed)
                - 404: Not Found (resource doesn't exist)
                - 409: Conflict (resource already exists)
                - 500: Internal Server Error (server-side error)
                - 503: Service Unavailable (credential store unreachable)
        internal_error: Optional original exception that caused this error. The full
            exception (including stack trace) is logged but not included in the response.
        user_message: Optional custom user-friendly message. If None, a generic message
            appropriate for the status code is used.

    Returns:
        HTTPException configured with the appropriate status code and safe error message.

    Example:
        ```python
        try:
            user = await authenticator.register(...)
        except UsernameTakenError as e:
            raise create_api_error(
                operation="registering user",
                status_code=409,
                user_message=e.message,
            )
        ```

    Note:
        - If user_message is None, a default message is generated based on status_code
        - Internal errors are logged with full exception details for debugging
    """
    if internal_error:
        logger.opt(exception=internal_error).error(
            f"API error in {operation}: {internal_error}"
        )

    if user_message:
        message = user_message
    elif status_code == HTTP_400_BAD_REQUEST:
        message = "Invalid request. Please check your input and try again."
    elif status_code == HTTP_401_UNAUTHORIZED:
        message = "Authentication failed. Please check your credentials."
    elif status_code == HTTP_403_FORBIDDEN:
        message = "Access denied. You don't have permission to perform this action."
    elif status_code == HTTP_404_NOT_FOUND:
        message = "Resource not found."
    elif status_code == HTTP_409_CONFLICT:
        message = "Resource already exists."
    elif status_code == HTTP_422_UNPROCESSABLE_ENTITY:
        message = "Validation error. Please check your request parameters."
    elif status_code == HTTP_503_SERVICE_UNAVAILABLE:
        message = "Service temporarily unavailable. Please try again later."
    else:
        message = (
            "An error occurred while processing your request. Please try again later."
        )

    return HTTPException(status_code=status_code, detail=message)


def handle_database_error(operation: str, error: Exception) -> HTTPException:
    """
    Handle credential store errors with generic, safe error messages.

    Args:
        operation: Description of the database operation that failed (e.g.,
            "registering user").
        error: The exception that occurred, typically a StoreUnavailableError
            wrapping a SQLAlchemy or driver error.

    Returns:
        HTTPException with status code 503 and a message that doesn't expose
        database structure, query details, or connection information.
    """
    return create_api_error(
        operation=operation,
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        internal_error=error,
        user_message="Credential store is temporarily unavailable. Please try again later.",
    )
