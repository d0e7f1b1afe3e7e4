"""
Authentication module interfaces.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with fakes and swapping the
hashing or signing primitive.
"""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ITokenCodec(Protocol):
    """Issues and verifies signed session tokens."""

    def create(self, claims: dict[str, Any]) -> str:
        """
        Issue a token for the given claims.

        Returns:
            Dot-joined `header.payload.signature` string
        """
        ...

    def verify(self, token: Optional[str]) -> Optional[dict[str, Any]]:
        """
        Verify a token.

        Returns:
            The decoded claims, or None if the token is rejected for any reason
        """
        ...


@runtime_checkable
class ICredentialStore(Protocol):
    """One-way password hashing."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        ...
