"""
Authentication module exceptions.

These exceptions are raised by the auth module and caught by the
request router to return appropriate HTTP responses.
"""

from shared.exceptions import AuthenticationError, AuthorizationError, ValidationError


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, forged or expired."""

    def __init__(self, message: str = "Token is invalid or expired"):
        super().__init__(message, code="INVALID_TOKEN")


class MissingTokenError(AuthenticationError):
    """Raised when no bearer token is provided."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match an active user."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class InsufficientPermissionsError(AuthorizationError):
    """Raised when user lacks required permissions."""

    def __init__(self, required_role: str, user_role: str, message: str | None = None):
        super().__init__(
            message or f"Insufficient permissions. Required: {required_role}, has: {user_role}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_role": required_role, "user_role": user_role},
        )


class WeakPasswordError(ValidationError):
    """Raised when a new password does not meet the length policy."""

    def __init__(self, min_length: int):
        super().__init__(
            f"Password must be at least {min_length} characters",
            code="WEAK_PASSWORD",
            details={"min_length": min_length},
        )
