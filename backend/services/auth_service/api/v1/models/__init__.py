"""
Authentication Service API v1 Models Package

This package exports all Pydantic models used for request/response validation
in the authentication service API v1.

Models:
    - LoginRequest: Username/password login request
    - LoginResponse: Login result with the session's user and tenant
    - LogoutResponse: Logout response
    - SessionResponse: Current session
    - RegisterRequest: Self-registration request
    - UserResponse: Public view of a user

All models use Pydantic BaseModel for automatic validation, serialization,
and OpenAPI schema generation.
"""

from .auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "RegisterRequest",
    "SessionResponse",
    "UserResponse",
]
