"""
Mail module interfaces.

Services depend on IMailer so tests can record messages instead of
talking to an SMTP server.
"""

from typing import Protocol, runtime_checkable

from .models import OutgoingEmail


@runtime_checkable
class IMailer(Protocol):
    """Delivers a single email."""

    @property
    def sender(self) -> str:
        """Address shown in the From header."""
        ...

    def send(self, message: OutgoingEmail) -> None:
        """
        Deliver a message.

        Raises:
            EmailDeliveryError: The server refused or could not be reached
        """
        ...
