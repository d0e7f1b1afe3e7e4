"""
Shared infrastructure for the CuraFlow auth backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: PostgreSQL connection factory
- exceptions: Base exception classes
- log_config: Console logging setup

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import connect, scoped_connection
from .exceptions import (
    CuraFlowError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    InternalError,
)
from .models import AuthenticatedUser

__all__ = [
    "Settings",
    "get_settings",
    "connect",
    "scoped_connection",
    "CuraFlowError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
    "AuthenticatedUser",
]
