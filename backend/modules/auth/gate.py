"""
Bearer token extraction and role enforcement.

Roles are read from the verified token, not from the store. A demoted
user keeps the old role until the current token expires.
"""

from typing import Mapping, Optional

from shared.models import AuthenticatedUser

from .exceptions import InsufficientPermissionsError, InvalidTokenError, MissingTokenError
from .interfaces import ITokenCodec

BEARER_PREFIX = "Bearer "


class AuthorizationGate:
    """Guards protected actions using a token codec."""

    def __init__(self, codec: ITokenCodec):
        self._codec = codec

    @staticmethod
    def extract_bearer_token(headers: Mapping[str, str]) -> Optional[str]:
        """Return the token after a case-sensitive `Bearer ` prefix, or None."""
        value = headers.get("authorization") or headers.get("Authorization")
        if not value or not value.startswith(BEARER_PREFIX):
            return None
        return value[len(BEARER_PREFIX):]

    def require_authenticated(self, token: Optional[str]) -> AuthenticatedUser:
        """
        Verify the token and return the caller.

        Raises:
            MissingTokenError: No token was supplied
            InvalidTokenError: Signature, format or expiry check failed
        """
        if not token:
            raise MissingTokenError()

        claims = self._codec.verify(token)
        if claims is None or "sub" not in claims:
            raise InvalidTokenError()

        return AuthenticatedUser.from_claims(claims)

    @staticmethod
    def require_role(user: AuthenticatedUser, role: str) -> AuthenticatedUser:
        """Raise InsufficientPermissionsError unless the token carries `role`."""
        if user.role != role:
            raise InsufficientPermissionsError(
                required_role=role,
                user_role=user.role,
                message="Only administrators may perform this action",
            )
        return user

    def verify(self, token: Optional[str]) -> Optional[dict]:
        """Claims for a token, or None. Never raises."""
        return self._codec.verify(token)
