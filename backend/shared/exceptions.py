"""
Base exception classes for the CuraFlow auth backend.

Each module should define its own exceptions that inherit from these bases.
Every base carries the HTTP status it maps to, so the request router can
shape a `{"error": ...}` response without knowing the concrete subclass.
"""

from typing import Optional, Any


class CuraFlowError(Exception):
    """
    Base exception for all CuraFlow errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the API error body."""
        return {"error": self.message}


class ValidationError(CuraFlowError):
    """Input validation failed."""

    status_code = 400


class AuthenticationError(CuraFlowError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(CuraFlowError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class NotFoundError(CuraFlowError):
    """Resource not found."""

    status_code = 404


class ConflictError(CuraFlowError):
    """Resource already exists."""

    status_code = 409


class InternalError(CuraFlowError):
    """Unexpected store or crypto failure."""

    status_code = 500
