"""
Authentication Service API v1 Package

This package contains version 1 of the authentication service API, including
all endpoints, models, and routing configuration.

Version 1 provides:
    - Username/password login with legacy tenant fallback
    - Logout and current-session reads
    - Self-registration

All endpoints are prefixed with /api/v1/auth and follow consistent error handling
and response patterns.
"""
