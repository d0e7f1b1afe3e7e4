"""
Authentication module data models.

These models define the token structure produced and consumed by
the token codec.
"""

from typing import Optional
from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """
    Claims carried in a session token payload.

    `iat` and `exp` are stamped by the codec at creation time.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: str = Field(..., description="Normalized email")
    role: str = Field(default="user", description="Role at issuance time")
    doctor_id: Optional[str] = Field(None, description="Linked doctor record")
    iat: Optional[int] = Field(None, description="Issued at timestamp")
    exp: Optional[int] = Field(None, description="Expiration timestamp")


class VerifyResponse(BaseModel):
    """Response body of the `verify` action."""

    valid: bool = Field(..., description="Whether the token is valid")
    payload: Optional[dict] = Field(None, description="Decoded claims if valid")
