"""
User account service.

Business logic behind every auth action. Authorization has already been
enforced by the request router when these methods run; methods that need
the caller receive it as an AuthenticatedUser built from the token.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from modules.auth.exceptions import InvalidCredentialsError
from modules.auth.interfaces import ICredentialStore, ITokenCodec
from modules.auth.models import TokenClaims
from modules.auth.passwords import (
    MIN_PASSWORD_LENGTH,
    check_password_policy,
    generate_temporary_password,
)
from modules.mail import EmailNotConfiguredError, IMailer, password_email, smtp_check_email
from shared.exceptions import AuthenticationError, ValidationError
from shared.models import AuthenticatedUser

from .audit import AuditLogger
from .exceptions import (
    EmailInUseError,
    InvalidVerificationLinkError,
    MissingEmailError,
    NoUpdatableFieldsError,
    UserAlreadyExistsError,
    UserNotFoundError,
    VerificationExpiredError,
    VerificationNotFoundError,
)
from .models import AdminUserUpdate, SelfProfileUpdate, UserRole, normalize_email
from .repository import EmailVerificationRepository, UserRepository
from .sanitize import sanitize_user, sanitize_users

logger = logging.getLogger(__name__)

VERIFICATION_TOKEN_BYTES = 32
MAX_VERIFICATION_TOKEN_LENGTH = 100


def _validation_message(error: PydanticValidationError) -> str:
    fields = sorted({".".join(str(p) for p in e["loc"]) for e in error.errors()})
    return f"Invalid value for: {', '.join(fields)}"


class UserService:
    """
    Implementation of the user account operations.

    One instance serves one request: it wraps the repository bound to
    that request's connection.
    """

    def __init__(
        self,
        users: UserRepository,
        credentials: ICredentialStore,
        codec: ITokenCodec,
        audit: AuditLogger,
        min_password_length: int = MIN_PASSWORD_LENGTH,
        mailer: Optional[IMailer] = None,
        verifications: Optional[EmailVerificationRepository] = None,
        login_url: str = "",
        public_api_url: str = "",
        verification_ttl_days: int = 7,
    ):
        self._users = users
        self._credentials = credentials
        self._codec = codec
        self._audit = audit
        self._min_password_length = min_password_length
        self._mailer = mailer
        self._verifications = verifications
        self._login_url = login_url
        self._public_api_url = public_api_url.rstrip("/")
        self._verification_ttl = timedelta(days=verification_ttl_days)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def login(self, email: str, password: str) -> dict[str, Any]:
        """
        Exchange credentials for a session token.

        Unknown email and wrong password produce the same error.
        """
        user = self._users.find_active_by_email(email)
        if user is None or not self._credentials.verify(password, user.get("password_hash")):
            raise InvalidCredentialsError()

        self._users.touch_last_login(user["id"])

        claims = TokenClaims(
            sub=str(user["id"]),
            email=user["email"],
            role=user.get("role") or UserRole.USER.value,
            doctor_id=user.get("doctor_id"),
        )
        token = self._codec.create(claims.model_dump(exclude={"iat", "exp"}))
        logger.info(f"User {user['id']} logged in")

        return {
            "token": token,
            "user": sanitize_user(user),
            "must_change_password": bool(user.get("must_change_password")),
        }

    def me(self, caller: AuthenticatedUser) -> dict[str, Any]:
        user = self._users.get_active_by_id(caller.id)
        if user is None:
            raise UserNotFoundError(caller.id)
        return sanitize_user(user)

    # -------------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------------

    def register(
        self,
        email: str,
        password: str,
        full_name: str = "",
        role: UserRole = UserRole.USER,
        doctor_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Create a user, or reactivate a soft-deleted one with the same email.

        The existence check and the write are separate statements, so two
        concurrent registrations for one email can both succeed.
        """
        check_password_policy(password, self._min_password_length)

        matches = self._users.find_any_by_email(email)
        if any(row.get("is_active") for row in matches):
            raise UserAlreadyExistsError(normalize_email(email))

        fields = {
            "email": email,
            "password_hash": self._credentials.hash(password),
            "full_name": full_name or "",
            "role": UserRole(role).value,
            "doctor_id": doctor_id or None,
        }

        if matches:
            previous = matches[0]
            user = self._users.reactivate(previous["id"], fields)
            logger.info(f"Reactivated user {previous['id']}")
        else:
            user = self._users.insert(fields)
            logger.info(f"Created user {user['id']}")

        return {"user": sanitize_user(user)}

    def list_users(self) -> list[dict[str, Any]]:
        return sanitize_users(self._users.list_users())

    def update_user(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Administrator update of any account, including an optional password reset."""
        if not data:
            raise NoUpdatableFieldsError("No data to update")

        try:
            update = AdminUserUpdate.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_validation_message(e))

        fields = update.model_dump(mode="json", exclude_unset=True, exclude={"password"})

        password_hash = None
        if update.password:
            check_password_policy(update.password, self._min_password_length)
            password_hash = self._credentials.hash(update.password)

        existing = self._users.get_by_id(user_id)
        if existing is None:
            raise UserNotFoundError(user_id)

        if fields.get("is_active") and not existing.get("is_active"):
            holder = self._users.find_active_by_email(existing["email"])
            if holder is not None and holder["id"] != user_id:
                raise UserAlreadyExistsError(normalize_email(existing["email"]))

        user = self._users.update_any(user_id, fields, password_hash=password_hash)
        if user is None:
            raise UserNotFoundError(user_id)
        return sanitize_user(user)

    def delete_user(self, caller: AuthenticatedUser, user_id: str) -> dict[str, Any]:
        """
        Soft delete a user and write the audit record.

        Order matters: capture the pre-image, mutate, then log, so the
        audit entry reflects the state before the change.
        """
        image = self._audit.capture(user_id)
        self._users.soft_delete(user_id)
        self._audit.record_deactivation(caller, image)
        return {"success": True}

    # -------------------------------------------------------------------------
    # Self service
    # -------------------------------------------------------------------------

    def update_me(self, caller: AuthenticatedUser, data: dict[str, Any]) -> dict[str, Any]:
        if not data:
            raise NoUpdatableFieldsError("No data to update")

        try:
            update = SelfProfileUpdate.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_validation_message(e))

        user = self._users.update_self(caller.id, update.model_dump(mode="json", exclude_unset=True))
        if user is None:
            raise UserNotFoundError(caller.id)
        return sanitize_user(user)

    def change_password(
        self,
        caller: AuthenticatedUser,
        current_password: str,
        new_password: str,
    ) -> dict[str, Any]:
        check_password_policy(new_password, self._min_password_length)

        user = self._users.get_by_id(caller.id)
        if user is None:
            raise UserNotFoundError(caller.id)

        if not self._credentials.verify(current_password, user.get("password_hash")):
            raise AuthenticationError("Current password is incorrect", code="WRONG_PASSWORD")

        self._users.update_password(caller.id, self._credentials.hash(new_password))
        logger.info(f"User {caller.id} changed their password")
        return {"success": True}

    def change_email(
        self,
        caller: AuthenticatedUser,
        new_email: str,
        password: str,
    ) -> dict[str, Any]:
        user = self._users.get_by_id(caller.id)
        if user is None:
            raise UserNotFoundError(caller.id)

        if not self._credentials.verify(password, user.get("password_hash")):
            raise AuthenticationError("Password is incorrect", code="WRONG_PASSWORD")

        if self._users.email_taken_by_other(new_email, caller.id):
            raise EmailInUseError(normalize_email(new_email))

        self._users.update_email(caller.id, new_email)
        logger.info(f"User {caller.id} changed their email")
        return {"success": True}

    # -------------------------------------------------------------------------
    # Account emails
    # -------------------------------------------------------------------------

    def _require_mailer(self) -> IMailer:
        if self._mailer is None:
            raise EmailNotConfiguredError()
        return self._mailer

    def send_password_email(self, caller: AuthenticatedUser, user_id: str) -> dict[str, Any]:
        """
        Reset a user's password to a random one and email it to them.

        The user must change the password at next login. When link
        storage is available the email also carries a verification link.
        The new password is stored before sending, so a delivery failure
        leaves the account waiting for another email.
        """
        mailer = self._require_mailer()

        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        email = (user.get("email") or "").strip()
        if not email:
            raise MissingEmailError(user_id)

        temporary_password = generate_temporary_password()
        self._users.set_temporary_password(user_id, self._credentials.hash(temporary_password))

        verify_url = None
        if self._verifications is not None:
            token = secrets.token_hex(VERIFICATION_TOKEN_BYTES)
            self._verifications.create(user_id, token, datetime.now(timezone.utc) + self._verification_ttl)
            verify_url = f"{self._public_api_url}/api/auth/verify-email?token={token}"

        mailer.send(
            password_email(
                email=email,
                full_name=user.get("full_name"),
                temporary_password=temporary_password,
                login_url=self._login_url,
                verify_url=verify_url,
            )
        )
        self._audit.record_password_email(caller, user_id, email)
        logger.info(f"Password email sent to {email} by admin {caller.email}")

        return {"success": True, "message": f"Password email sent to {email}"}

    def send_test_email(self, caller: AuthenticatedUser) -> dict[str, Any]:
        """Send a test message to the calling administrator."""
        mailer = self._require_mailer()
        timestamp = datetime.now(timezone.utc).isoformat()
        mailer.send(smtp_check_email(caller.email, mailer.sender, timestamp))
        return {"success": True, "message": f"Test email sent to {caller.email}"}

    def verify_email(self, token: Optional[str]) -> str:
        """
        Consume a verification link.

        Returns:
            "verified", or "already_verified" when the link was used before

        Raises:
            InvalidVerificationLinkError: Missing or oversized token
            VerificationNotFoundError: No link with this token
            VerificationExpiredError: Link is past its expiry date
        """
        if not token or len(token) > MAX_VERIFICATION_TOKEN_LENGTH or self._verifications is None:
            raise InvalidVerificationLinkError()

        record = self._verifications.find_by_token(token)
        if record is None:
            raise VerificationNotFoundError()

        if record.get("status") == "verified":
            return "already_verified"

        expires = record.get("expires_date")
        if expires is not None and expires < datetime.now(timezone.utc):
            self._verifications.mark_expired(record["id"])
            raise VerificationExpiredError(record["id"])

        self._verifications.mark_verified(record["id"])
        self._users.mark_email_verified(record["user_id"])
        logger.info(f"Email verified for user {record['user_id']}")
        return "verified"

    def email_verification_status(self, user_id: str) -> dict[str, Any]:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        last = self._verifications.latest_for_user(user_id) if self._verifications else None
        return {
            "email_verified": bool(user.get("email_verified")),
            "email_verified_date": user.get("email_verified_date"),
            "last_verification": last,
        }
