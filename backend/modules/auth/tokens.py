"""
Signed session tokens.

Tokens are compact HS256 JWTs: header, payload and signature as
unpadded base64url segments joined by dots. There is no revocation
store, so a token stays valid until its `exp` regardless of later
account changes.
"""

import logging
import time
from typing import Any, Callable, Optional

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_LIFETIME_SECONDS = 86400


class TokenCodec:
    """
    Creates and verifies signed session tokens.

    The secret is captured at construction and never changes; rotating it
    means building a new codec, which invalidates every outstanding token.
    """

    def __init__(
        self,
        secret: str,
        lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise RuntimeError("Token signing secret is not configured. Set JWT_SECRET.")
        self._secret = secret
        self._lifetime = lifetime_seconds
        self._clock = clock

    def create(self, claims: dict[str, Any]) -> str:
        """
        Issue a token for the given claims.

        Args:
            claims: Subject claims (sub, email, role, doctor_id)

        Returns:
            `header.payload.signature` string
        """
        now = int(self._clock())
        payload = {**claims, "iat": now, "exp": now + self._lifetime}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: Optional[str]) -> Optional[dict[str, Any]]:
        """
        Verify a token and return its claims.

        Fails closed: any problem yields None instead of an exception so
        every caller handles rejection the same way. Expiry is checked
        against the codec's clock and must be strictly in the future.
        """
        if not token or not isinstance(token, str) or token.count(".") != 2:
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug(f"Token rejected: {e}")
            return None

        exp = payload.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)) or exp <= self._clock():
            return None

        return payload
