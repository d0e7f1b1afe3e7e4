"""
SMTP delivery.

One connection per message. Port 465 uses implicit TLS; any other port
upgrades with STARTTLS unless that is switched off.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from .exceptions import EmailDeliveryError
from .models import OutgoingEmail

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


def _describe(error: Exception) -> str:
    """Turn an SMTP failure into a message an administrator can act on."""
    if isinstance(error, smtplib.SMTPAuthenticationError):
        return "SMTP authentication failed (check SMTP_USER/SMTP_PASSWORD)"
    if isinstance(error, ConnectionRefusedError):
        return "SMTP server unreachable"
    if isinstance(error, smtplib.SMTPResponseException):
        detail = error.smtp_error
        if isinstance(detail, bytes):
            detail = detail.decode("utf-8", errors="replace")
        return f"SMTP error {error.smtp_code}: {detail}"
    if isinstance(error, (smtplib.SMTPServerDisconnected, OSError)):
        return f"SMTP connection error (check port/TLS): {error}"
    return str(error)


class SmtpMailer:
    """Sends account emails through a configured SMTP server."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        sender: str = "CuraFlow <noreply@curaflow.de>",
        starttls: bool = True,
        timeout: float = 30,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self._sender = sender
        self.starttls = starttls
        self.timeout = timeout

    @property
    def sender(self) -> str:
        return self._sender

    def _build(self, message: OutgoingEmail) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = self._sender
        mime["To"] = message.to.strip()
        mime["Subject"] = message.subject
        mime.attach(MIMEText(message.text, "plain", "utf-8"))
        mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime

    def _connect(self) -> smtplib.SMTP:
        if self.port == IMPLICIT_TLS_PORT:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def send(self, message: OutgoingEmail) -> None:
        mime = self._build(message)
        try:
            with self._connect() as server:
                if self.starttls and self.port != IMPLICIT_TLS_PORT:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(mime)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Sending '{message.subject}' to {message.to} failed: {e}")
            raise EmailDeliveryError(_describe(e))

        logger.info(f"Email '{message.subject}' sent to {message.to}")
