"""
User repository for database access.

Encapsulates all SQL for the `app_users` table, the `system_log`
audit table and the `email_verification` link table. Emails are
normalized here, on every read and write.

Note: This repository does NOT perform authorization checks.
The service layer and the request router decide who may call what.
"""

import json
import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

from psycopg2 import sql

from shared.repository import BaseRepository

from .exceptions import NoUpdatableFieldsError
from .models import ADMIN_UPDATABLE_FIELDS, SELF_UPDATABLE_FIELDS, normalize_email

USERS_TABLE = "app_users"
SYSTEM_LOG_TABLE = "system_log"
EMAIL_VERIFICATION_TABLE = "email_verification"

VERIFY_EMAIL = "email_verify"


def _to_column_value(value: Any) -> Any:
    """Lists and dicts are stored as JSON text."""
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


def _filter_fields(fields: dict[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    allowed = set(allowed)
    return {k: _to_column_value(v) for k, v in fields.items() if k in allowed}


class UserRepository(BaseRepository[dict]):
    """
    Repository for user rows.

    Rows are returned as plain dicts straight from the cursor, secrets
    included; callers sanitize before anything leaves the service.
    """

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_active_by_email(self, email: str) -> Optional[dict]:
        """Get the active user for an email, used by login."""
        return self._fetch_one(
            sql.SQL("SELECT * FROM {} WHERE email = %s AND is_active = TRUE").format(
                sql.Identifier(USERS_TABLE)
            ),
            (normalize_email(email),),
        )

    def find_any_by_email(self, email: str) -> list[dict]:
        """Get active and soft-deleted users for an email, used by register."""
        return self._fetch_all(
            sql.SQL("SELECT * FROM {} WHERE email = %s ORDER BY created_date DESC").format(
                sql.Identifier(USERS_TABLE)
            ),
            (normalize_email(email),),
        )

    def get_by_id(self, user_id: str) -> Optional[dict]:
        return self._fetch_one(
            sql.SQL("SELECT * FROM {} WHERE id = %s").format(sql.Identifier(USERS_TABLE)),
            (user_id,),
        )

    def get_active_by_id(self, user_id: str) -> Optional[dict]:
        return self._fetch_one(
            sql.SQL("SELECT * FROM {} WHERE id = %s AND is_active = TRUE").format(
                sql.Identifier(USERS_TABLE)
            ),
            (user_id,),
        )

    def email_taken_by_other(self, email: str, user_id: str) -> bool:
        row = self._fetch_one(
            sql.SQL("SELECT id FROM {} WHERE email = %s AND id <> %s").format(
                sql.Identifier(USERS_TABLE)
            ),
            (normalize_email(email), user_id),
        )
        return row is not None

    def list_users(self) -> list[dict]:
        """All users, active and inactive, newest first."""
        return self._fetch_all(
            sql.SQL("SELECT * FROM {} ORDER BY created_date DESC").format(
                sql.Identifier(USERS_TABLE)
            )
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def insert(self, fields: dict[str, Any]) -> dict:
        """
        Create a new active user with a fresh id.

        Args:
            fields: email, password_hash, full_name, role, doctor_id and
                optionally must_change_password

        Returns:
            The created row
        """
        values = {
            "id": str(uuid.uuid4()),
            "email": normalize_email(fields["email"]),
            "password_hash": fields["password_hash"],
            "full_name": fields.get("full_name") or "",
            "role": fields.get("role") or "user",
            "doctor_id": fields.get("doctor_id") or None,
            "must_change_password": bool(fields.get("must_change_password", False)),
            "is_active": True,
        }
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            sql.Identifier(USERS_TABLE),
            sql.SQL(", ").join(sql.Identifier(k) for k in values),
            sql.SQL(", ").join(sql.Placeholder() for _ in values),
        )
        return self._fetch_one(query, tuple(values.values()))

    def reactivate(self, user_id: str, fields: dict[str, Any]) -> Optional[dict]:
        """
        Bring a soft-deleted user back under its old id.

        Credentials and profile are replaced; the forced password change
        flag is cleared.
        """
        query = sql.SQL(
            "UPDATE {} SET password_hash = %s, full_name = %s, role = %s, doctor_id = %s, "
            "is_active = TRUE, must_change_password = FALSE, updated_date = NOW() "
            "WHERE id = %s RETURNING *"
        ).format(sql.Identifier(USERS_TABLE))
        return self._fetch_one(
            query,
            (
                fields["password_hash"],
                fields.get("full_name") or "",
                fields.get("role") or "user",
                fields.get("doctor_id") or None,
                user_id,
            ),
        )

    def update_self(self, user_id: str, fields: dict[str, Any]) -> Optional[dict]:
        """Apply a profile/preferences update; keys outside the whitelist are dropped."""
        return self._update(user_id, _filter_fields(fields, SELF_UPDATABLE_FIELDS))

    def update_any(
        self,
        user_id: str,
        fields: dict[str, Any],
        password_hash: Optional[str] = None,
    ) -> Optional[dict]:
        """Administrator update, optionally resetting the password hash."""
        values = _filter_fields(fields, ADMIN_UPDATABLE_FIELDS)
        if password_hash:
            values["password_hash"] = password_hash
        return self._update(user_id, values)

    def update_password(self, user_id: str, password_hash: str) -> int:
        return self._execute(
            sql.SQL(
                "UPDATE {} SET password_hash = %s, must_change_password = FALSE, "
                "updated_date = NOW() WHERE id = %s"
            ).format(sql.Identifier(USERS_TABLE)),
            (password_hash, user_id),
        )

    def set_temporary_password(self, user_id: str, password_hash: str) -> int:
        """Store an emailed password; the user must replace it at next login."""
        return self._execute(
            sql.SQL(
                "UPDATE {} SET password_hash = %s, must_change_password = TRUE, "
                "updated_date = NOW() WHERE id = %s"
            ).format(sql.Identifier(USERS_TABLE)),
            (password_hash, user_id),
        )

    def mark_email_verified(self, user_id: str) -> int:
        return self._execute(
            sql.SQL(
                "UPDATE {} SET email_verified = TRUE, email_verified_date = NOW(), "
                "updated_date = NOW() WHERE id = %s"
            ).format(sql.Identifier(USERS_TABLE)),
            (user_id,),
        )

    def update_email(self, user_id: str, email: str) -> int:
        return self._execute(
            sql.SQL("UPDATE {} SET email = %s, updated_date = NOW() WHERE id = %s").format(
                sql.Identifier(USERS_TABLE)
            ),
            (normalize_email(email), user_id),
        )

    def touch_last_login(self, user_id: str) -> int:
        return self._execute(
            sql.SQL("UPDATE {} SET last_login = NOW() WHERE id = %s").format(
                sql.Identifier(USERS_TABLE)
            ),
            (user_id,),
        )

    def soft_delete(self, user_id: str) -> int:
        """Mark a user inactive. Repeating the call is harmless."""
        return self._execute(
            sql.SQL("UPDATE {} SET is_active = FALSE, updated_date = NOW() WHERE id = %s").format(
                sql.Identifier(USERS_TABLE)
            ),
            (user_id,),
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _update(self, user_id: str, values: dict[str, Any]) -> Optional[dict]:
        if not values:
            raise NoUpdatableFieldsError()

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in values
        )
        query = sql.SQL("UPDATE {} SET {}, updated_date = NOW() WHERE id = %s RETURNING *").format(
            sql.Identifier(USERS_TABLE), assignments
        )
        return self._fetch_one(query, (*values.values(), user_id))


class SystemLogRepository(BaseRepository[dict]):
    """Writes audit entries to the shared system log table."""

    def insert(
        self,
        level: str,
        source: str,
        message: str,
        details: dict[str, Any],
        created_by: Optional[str],
    ) -> str:
        log_id = str(uuid.uuid4())
        self._execute(
            sql.SQL(
                "INSERT INTO {} (id, level, source, message, details, created_by) "
                "VALUES (%s, %s, %s, %s, %s, %s)"
            ).format(sql.Identifier(SYSTEM_LOG_TABLE)),
            (log_id, level, source, message, json.dumps(details), created_by),
        )
        return log_id


class EmailVerificationRepository(BaseRepository[dict]):
    """One-time email verification links."""

    def create(self, user_id: str, token: str, expires_date: datetime) -> str:
        verification_id = str(uuid.uuid4())
        self._execute(
            sql.SQL(
                "INSERT INTO {} (id, user_id, token, type, status, expires_date) "
                "VALUES (%s, %s, %s, %s, 'pending', %s)"
            ).format(sql.Identifier(EMAIL_VERIFICATION_TABLE)),
            (verification_id, user_id, token, VERIFY_EMAIL, expires_date),
        )
        return verification_id

    def find_by_token(self, token: str) -> Optional[dict]:
        return self._fetch_one(
            sql.SQL(
                "SELECT id, user_id, status, expires_date FROM {} WHERE token = %s AND type = %s"
            ).format(sql.Identifier(EMAIL_VERIFICATION_TABLE)),
            (token, VERIFY_EMAIL),
        )

    def mark_verified(self, verification_id: str) -> int:
        return self._execute(
            sql.SQL("UPDATE {} SET status = 'verified', verified_date = NOW() WHERE id = %s").format(
                sql.Identifier(EMAIL_VERIFICATION_TABLE)
            ),
            (verification_id,),
        )

    def mark_expired(self, verification_id: str) -> int:
        return self._execute(
            sql.SQL("UPDATE {} SET status = 'expired' WHERE id = %s").format(
                sql.Identifier(EMAIL_VERIFICATION_TABLE)
            ),
            (verification_id,),
        )

    def latest_for_user(self, user_id: str) -> Optional[dict]:
        """Most recent link sent to a user, as `{created_date, status}`."""
        return self._fetch_one(
            sql.SQL(
                "SELECT created_date, status FROM {} WHERE user_id = %s "
                "ORDER BY created_date DESC LIMIT 1"
            ).format(sql.Identifier(EMAIL_VERIFICATION_TABLE)),
            (user_id,),
        )
