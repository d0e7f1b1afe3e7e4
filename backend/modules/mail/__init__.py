"""
Outgoing email.

Delivers account emails (temporary passwords, verification links)
over SMTP and renders their content.

Public API:
- SmtpMailer / IMailer: Message delivery
- OutgoingEmail: One message with plain-text and HTML bodies
- Templates: password_email, smtp_check_email, verification_page
- Mail exceptions: EmailNotConfiguredError, EmailDeliveryError
"""

from .interfaces import IMailer
from .models import OutgoingEmail
from .mailer import SmtpMailer
from .templates import password_email, smtp_check_email, verification_page
from .exceptions import EmailDeliveryError, EmailNotConfiguredError

__all__ = [
    "IMailer",
    "OutgoingEmail",
    "SmtpMailer",
    "password_email",
    "smtp_check_email",
    "verification_page",
    "EmailDeliveryError",
    "EmailNotConfiguredError",
]
