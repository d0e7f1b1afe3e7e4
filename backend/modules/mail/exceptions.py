"""
Mail module exceptions.
"""

from shared.exceptions import InternalError


class EmailNotConfiguredError(InternalError):
    """Raised when an email is requested but no SMTP server is configured."""

    def __init__(self):
        super().__init__(
            "Email delivery is not configured. Set SMTP_HOST, SMTP_USER and SMTP_PASSWORD.",
            code="EMAIL_NOT_CONFIGURED",
        )


class EmailDeliveryError(InternalError):
    """Raised when the SMTP server rejects a message or cannot be reached."""

    def __init__(self, detail: str):
        super().__init__(
            f"Email delivery failed: {detail}",
            code="EMAIL_DELIVERY_FAILED",
            details={"detail": detail},
        )
