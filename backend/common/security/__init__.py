"""
Common security utilities for authentication.
"""

from .credentials import credentials_match

__all__ = ["credentials_match"]
