"""
Authentication Service API v1 Endpoints Package

This package contains the API endpoint handlers for version 1 of the
authentication service API.

Endpoints:
    - auth.py: Authentication endpoints (login, logout, session, register)

All endpoints use FastAPI's dependency injection system and Pydantic models
for request/response validation.
"""
