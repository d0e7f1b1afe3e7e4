"""
Password hashing and verification.

Uses bcrypt with a fixed cost factor. Length policy is checked by the
callers that accept a new password, not by the hasher.
"""

import logging
import secrets

import bcrypt

from .exceptions import WeakPasswordError

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 8

# Look-alike characters (I, l, O, 0, 1) are left out of temporary passwords.
TEMP_PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"
TEMP_PASSWORD_SPECIALS = "!@#$%&*"


def check_password_policy(password: str, min_length: int = MIN_PASSWORD_LENGTH) -> None:
    """Raise WeakPasswordError if the password is too short."""
    if len(password) < min_length:
        raise WeakPasswordError(min_length)


def generate_temporary_password(length: int = 10) -> str:
    """
    Random password handed out by email.

    `length` letters and digits followed by one special character and
    one digit.
    """
    body = "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))
    return body + secrets.choice(TEMP_PASSWORD_SPECIALS) + secrets.choice("0123456789")


class CredentialStore:
    """One-way password hashing backed by bcrypt."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """
        Compare a candidate password with a stored hash.

        The comparison is bcrypt's own; a missing or malformed stored
        hash counts as a mismatch.
        """
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False
