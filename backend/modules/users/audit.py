"""
Audit trail for destructive administrative actions.

A soft-deleted user disappears from normal use while the row stays in
the table, so the audit line is the record of who deactivated whom and
when. The pre-image must be captured before the mutation runs.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

from shared.log_config import AUDIT_LOGGER_NAME
from shared.models import AuthenticatedUser

from .repository import SystemLogRepository, UserRepository

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)

AUDIT_SOURCE = "user-management"


@dataclass(frozen=True)
class AuditImage:
    """State of a user right before a destructive change."""

    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    doctor_id: Optional[str] = None


class AuditLogger:
    """Records privileged mutations to the log and, if configured, the system_log table."""

    def __init__(
        self,
        users: UserRepository,
        system_log: Optional[SystemLogRepository] = None,
    ):
        self._users = users
        self._system_log = system_log

    def capture(self, user_id: str) -> AuditImage:
        """Read the pre-image of a user; unknown ids yield an id-only image."""
        row = self._users.get_by_id(user_id)
        if row is None:
            return AuditImage(user_id=user_id)
        return AuditImage(
            user_id=user_id,
            email=row.get("email"),
            full_name=row.get("full_name"),
            role=row.get("role"),
            doctor_id=row.get("doctor_id"),
        )

    def record_deactivation(self, actor: AuthenticatedUser, image: AuditImage) -> dict:
        """
        Emit the audit record for a soft delete.

        The log line is always written. The database copy is best effort:
        a failure there is logged and does not fail the request.
        """
        timestamp = datetime.now(timezone.utc).isoformat()
        audit_logger.info(
            f"[AUDIT][DELETE][USER] {timestamp} | Admin: {actor.email} | "
            f"Deactivated User: {image.email or image.user_id} | "
            f"Name: {image.full_name or 'unknown'} | Role: {image.role or 'unknown'}"
        )

        record = {
            "action": "user.deactivate",
            "timestamp": timestamp,
            "admin": actor.email,
            "admin_id": actor.id,
            **asdict(image),
        }

        self._persist(
            "audit",
            f"User deactivated: {image.email or image.user_id} ({image.full_name or 'unknown'})",
            record,
            actor,
            "user deactivation",
        )
        return record

    def record_password_email(self, actor: AuthenticatedUser, user_id: str, email: str) -> dict:
        """Note that an administrator emailed a temporary password to a user."""
        timestamp = datetime.now(timezone.utc).isoformat()
        audit_logger.info(
            f"[AUDIT][PASSWORD_EMAIL][USER] {timestamp} | Admin: {actor.email} | "
            f"Recipient: {email} | User: {user_id}"
        )

        record = {
            "action": "user.password_email",
            "timestamp": timestamp,
            "admin": actor.email,
            "admin_id": actor.id,
            "user_id": user_id,
            "email": email,
        }
        self._persist("info", f"Password email sent to: {email}", record, actor, "password email")
        return record

    def _persist(
        self,
        level: str,
        message: str,
        record: dict,
        actor: AuthenticatedUser,
        label: str,
    ) -> None:
        if self._system_log is None:
            return
        try:
            self._system_log.insert(
                level=level,
                source=AUDIT_SOURCE,
                message=message,
                details=record,
                created_by=actor.email,
            )
        except Exception as e:
            logger.error(f"Failed to write {label} audit entry: {e}")
