"""
User module exceptions.
"""

from shared.exceptions import ConflictError, CuraFlowError, NotFoundError, ValidationError


class UserNotFoundError(NotFoundError):
    """Raised when a referenced user does not exist."""

    def __init__(self, user_id: str):
        super().__init__(
            "User not found",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class UserAlreadyExistsError(ConflictError):
    """Raised when an active user already owns the email."""

    def __init__(self, email: str):
        super().__init__(
            "User already exists",
            code="USER_EXISTS",
            details={"email": email},
        )


class EmailInUseError(ConflictError):
    """Raised when changing to an email owned by another account."""

    def __init__(self, email: str):
        super().__init__(
            "This email address is already in use",
            code="EMAIL_IN_USE",
            details={"email": email},
        )


class NoUpdatableFieldsError(ValidationError):
    """Raised when an update carries no whitelisted field."""

    def __init__(self, message: str = "No valid fields to update"):
        super().__init__(message, code="NO_VALID_FIELDS")


class InvalidVerificationLinkError(ValidationError):
    """Raised when a verification token is missing or not well formed."""

    def __init__(self):
        super().__init__("Invalid verification link", code="INVALID_VERIFICATION_LINK")


class VerificationNotFoundError(NotFoundError):
    """Raised when no verification link matches the token."""

    def __init__(self):
        super().__init__("Verification link not found", code="VERIFICATION_NOT_FOUND")


class VerificationExpiredError(CuraFlowError):
    """Raised when a verification link is past its expiry date."""

    status_code = 410

    def __init__(self, verification_id: str):
        super().__init__(
            "Verification link has expired",
            code="VERIFICATION_EXPIRED",
            details={"verification_id": verification_id},
        )


class MissingEmailError(ValidationError):
    """Raised when an email is requested for a user without an address."""

    def __init__(self, user_id: str):
        super().__init__(
            "User has no email address",
            code="MISSING_EMAIL",
            details={"user_id": user_id},
        )
