"""
Authentication module.

Handles session tokens, password hashing and bearer-token authorization.

Public API:
- TokenCodec / ITokenCodec: Signed token creation and verification
- CredentialStore / ICredentialStore: Password hashing
- AuthorizationGate: Bearer extraction and role checks
- Auth exceptions: InvalidTokenError, MissingTokenError, etc.
"""

from .interfaces import ITokenCodec, ICredentialStore
from .models import TokenClaims, VerifyResponse
from .tokens import TokenCodec
from .passwords import CredentialStore, check_password_policy
from .gate import AuthorizationGate
from .exceptions import (
    InvalidTokenError,
    MissingTokenError,
    InvalidCredentialsError,
    InsufficientPermissionsError,
    WeakPasswordError,
)

__all__ = [
    # Interfaces
    "ITokenCodec",
    "ICredentialStore",
    # Implementations
    "TokenCodec",
    "CredentialStore",
    "AuthorizationGate",
    "check_password_policy",
    # Models
    "TokenClaims",
    "VerifyResponse",
    # Exceptions
    "InvalidTokenError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "InsufficientPermissionsError",
    "WeakPasswordError",
]
