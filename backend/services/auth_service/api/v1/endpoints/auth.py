"""
Authentication API Endpoints

This module defines the REST API endpoints for the authentication service, handling
username/password login, logout, session reads and self-registration.

Endpoints:
    POST /login
        Authenticate with username and password. Tries the credential store first
        and falls back to legacy tenant credentials for unknown usernames.

    POST /logout
        End the current session. Always succeeds.

    GET /session
        Return the current session, repairing its tenant linkage if needed.

    POST /register
        Create a user with role "user" in the credential store.

Error Handling:
    All endpoints follow consistent error handling patterns:
    - 401 Unauthorized: Invalid credentials, or no active session
    - 409 Conflict: Username already taken
    - 422 Unprocessable Entity: Unknown tenant on registration
    - 500 Internal Server Error: Unexpected server errors
    - 503 Service Unavailable: Credential store unavailable

Security Considerations:
    - Error responses never reveal whether the username or the password was wrong
    - Passwords are never logged or returned

Example Usage:
    ```python
    response = await client.post(
        "/api/v1/auth/login",
        json={"username": "admin", "password": "s3cret"},
    )
    tenant_id = response.json()["tenant_id"]
    ```

See Also:
    - services.auth_service.services.authenticator.Authenticator: Core business logic
    - services.auth_service.api.v1.models: Request/response models
"""

from fastapi import APIRouter, Depends, status

from common.exceptions import (
    HTTP_401_UNAUTHORIZED,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidCredentialsError,
    LoginFailedError,
    StoreUnavailableError,
    UnknownTenantError,
    UsernameTakenError,
    create_api_error,
    handle_database_error,
)
from services.auth_service.api.dependencies import get_authenticator
from services.auth_service.api.v1.models import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)
from services.auth_service.services import Authenticator
from services.auth_service.services.authenticator import DEFAULT_USER_ROLE

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    authenticator: Authenticator = Depends(get_authenticator),
) -> LoginResponse:
    """
    Authenticate a user and start the session.

    Args:
        request: Login request
            - username (str): Exact, case-sensitive username
            - password (str): Exact, case-sensitive password

    Returns:
        LoginResponse containing:
            - success (bool): True
            - message (str): Status message
            - user (UserResponse): The authenticated user
            - tenant_id (str): Tenant selected for the session

    Raises:
        HTTPException:
            - 401 Unauthorized: Unknown username or wrong password
            - 500 Internal Server Error: Unexpected error during login

    Note:
        - A user found in the credential store is never retried against legacy
          tenant credentials
        - Legacy logins are migrated into the credential store in the background
    """
    try:
        session = await authenticator.login(request.username, request.password)
    except InvalidCredentialsError as e:
        raise create_api_error(
            operation="logging in",
            status_code=HTTP_401_UNAUTHORIZED,
            user_message=e.message,
        ) from e
    except LoginFailedError as e:
        raise create_api_error(
            operation="logging in",
            internal_error=e.internal_error,
            user_message=e.message,
        ) from e

    return LoginResponse(
        success=True,
        message="Login successful",
        user=UserResponse.from_user(session.user),
        tenant_id=session.tenant_id,
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    authenticator: Authenticator = Depends(get_authenticator),
) -> LogoutResponse:
    """
    End the current session.

    The selected tenant is remembered for the next session. Calling this without
    an active session is not an error.
    """
    await authenticator.logout()
    return LogoutResponse(success=True, message="Logout successful")


@router.get("/session", response_model=SessionResponse)
async def get_session(
    authenticator: Authenticator = Depends(get_authenticator),
) -> SessionResponse:
    """
    Return the current session.

    Raises:
        HTTPException:
            - 401 Unauthorized: No active session
    """
    session = authenticator.get_current_session()
    if session is None:
        raise create_api_error(
            operation="reading session",
            status_code=HTTP_401_UNAUTHORIZED,
            user_message="Not authenticated.",
        )

    active_tenant = authenticator.active_tenant
    tenant_name = None
    if active_tenant and active_tenant.tenant and active_tenant.tenant_id == session.tenant_id:
        tenant_name = active_tenant.tenant.display_name

    return SessionResponse(
        user=UserResponse.from_user(session.user),
        tenant_id=session.tenant_id,
        tenant_name=tenant_name,
    )


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    request: RegisterRequest,
    authenticator: Authenticator = Depends(get_authenticator),
) -> UserResponse:
    """
    Register a new user in the credential store.

    Self-registered users always get the "user" role; any role sent by the
    caller is ignored.

    Args:
        request: Registration request
            - username (str): Desired username, unique across tenants
            - password (str): Password to store
            - tenant_id (str): Tenant the user belongs to
            - email (str | None): Optional contact address

    Returns:
        UserResponse: The created user (201 Created).

    Raises:
        HTTPException:
            - 409 Conflict: Username already taken
            - 422 Unprocessable Entity: Tenant does not exist
            - 503 Service Unavailable: Credential store unavailable
    """
    try:
        user = await authenticator.register(
            username=request.username,
            password=request.password,
            tenant_id=request.tenant_id,
            email=request.email,
            role=DEFAULT_USER_ROLE,
        )
    except UsernameTakenError as e:
        raise create_api_error(
            operation="registering user",
            status_code=HTTP_409_CONFLICT,
            user_message=e.message,
        ) from e
    except UnknownTenantError as e:
        raise create_api_error(
            operation="registering user",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            user_message=e.message,
        ) from e
    except StoreUnavailableError as e:
        raise handle_database_error("registering user", e.internal_error or e) from e

    return UserResponse.from_user(user)
