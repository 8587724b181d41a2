"""
Standalone utility to validate session tokens and extract the caller's identity.

This package has no dependency on other ministry packages (ministry.db, ministry.security, etc.).
Use validate_and_extract() with a bearer token string to get a SessionContext.
"""

from .config import SessionConfig
from .context import SessionContext
from .validator import SessionTokenValidator, ValidationError, validate_and_extract

__all__ = [
    "SessionConfig",
    "SessionContext",
    "SessionTokenValidator",
    "ValidationError",
    "validate_and_extract",
]
