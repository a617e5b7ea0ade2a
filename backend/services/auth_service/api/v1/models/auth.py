"""
Authentication API Request/Response Models

This module defines Pydantic models for request and response validation in the
authentication service API. All models use Pydantic's BaseModel for automatic
validation, serialization, and OpenAPI schema generation.

Models follow a consistent naming pattern:
    - Request models: {Action}Request (e.g., LoginRequest, RegisterRequest)
    - Response models: {Action}Response (e.g., LoginResponse, LogoutResponse)

Credentials appear only in request models. Response models carry UserResponse,
which has no credential field.

Example:
    ```python
    from services.auth_service.api.v1.models import LoginRequest, LoginResponse

    request = LoginRequest(username="admin", password="s3cret")
    response = LoginResponse(
        success=True,
        message="Login successful",
        user=UserResponse.from_user(session.user),
        tenant_id=session.tenant_id,
    )
    ```
"""

from datetime import datetime

from pydantic import BaseModel, Field

from services.auth_service.models import User


class LoginRequest(BaseModel):
    """
    Request model for the login endpoint.

    Attributes:
        username (str): Exact, case-sensitive username. For legacy tenants this
            may be the tenant's admin username or its identification number.
        password (str): Exact, case-sensitive password.

    Example:
        ```json
        {
            "username": "admin",
            "password": "s3cret"
        }
        ```
    """

    username: str = Field(..., description="Username to authenticate", min_length=1)
    password: str = Field(..., description="Password for the username", min_length=1)


class UserResponse(BaseModel):
    """Public view of a user. Never includes the stored credential."""

    id: str = Field(..., description="User identifier")
    username: str = Field(..., description="Username")
    email: str | None = Field(None, description="Contact email address")
    tenant_id: str | None = Field(None, description="Tenant the user belongs to")
    role: str = Field(..., description="Role name, e.g. 'user' or 'admin'")
    is_active: bool = Field(..., description="Whether the user may log in")
    last_login_at: datetime | None = Field(None, description="Time of the last successful login")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            tenant_id=user.tenant_id,
            role=user.role,
            is_active=user.is_active,
            last_login_at=user.last_login_at,
        )


class LoginResponse(BaseModel):
    """
    Response model for the login endpoint.

    Attributes:
        success (bool): Always True; failures are returned as HTTP errors.
        message (str): Human-readable status message.
        user (UserResponse): The authenticated user.
        tenant_id (str): The tenant selected for this session.

    Example:
        ```json
        {
            "success": true,
            "message": "Login successful",
            "user": {"id": "...", "username": "admin", "role": "admin", ...},
            "tenant_id": "acme"
        }
        ```
    """

    success: bool = Field(..., description="Whether login succeeded")
    message: str = Field(..., description="Human-readable status message")
    user: UserResponse = Field(..., description="Authenticated user")
    tenant_id: str = Field(..., description="Tenant selected for the session")


class LogoutResponse(BaseModel):
    """
    Response model for the logout endpoint.

    Logout always succeeds, also when no session was active.
    """

    success: bool = Field(..., description="Whether logout operation completed")
    message: str = Field(..., description="Human-readable logout status message")


class SessionResponse(BaseModel):
    """
    Response model for the current-session endpoint.

    Attributes:
        user (UserResponse): The session's user. ``tenant_id`` is always set.
        tenant_id (str): Tenant of the session.
        tenant_name (str | None): Display name of the active tenant, when known.
    """

    user: UserResponse = Field(..., description="Current user")
    tenant_id: str = Field(..., description="Tenant of the current session")
    tenant_name: str | None = Field(None, description="Display name of the active tenant")


class RegisterRequest(BaseModel):
    """
    Request model for the registration endpoint.

    Example:
        ```json
        {
            "username": "jane",
            "password": "correct horse",
            "tenant_id": "acme",
            "email": "jane@acme.example"
        }
        ```
    """

    username: str = Field(..., description="Desired username", min_length=1, max_length=100)
    password: str = Field(..., description="Password to store", min_length=1)
    tenant_id: str = Field(..., description="Tenant the user belongs to", min_length=1, max_length=64)
    email: str | None = Field(None, description="Contact email address")
