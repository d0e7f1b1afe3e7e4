"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """
    Represents the caller of a protected action.

    Populated from verified token claims, never from a database read,
    so the role reflects what was true when the token was issued.
    """

    id: str = Field(..., description="User ID (the token subject)")
    email: str = Field(..., description="Normalized email address")
    role: str = Field(default="user", description="Role claim from the token")
    doctor_id: Optional[str] = Field(None, description="Linked doctor record, if any")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore iat/exp and any future claims
    }

    @classmethod
    def from_claims(cls, claims: dict) -> "AuthenticatedUser":
        return cls(
            id=str(claims["sub"]),
            email=claims.get("email") or "",
            role=claims.get("role") or "user",
            doctor_id=claims.get("doctor_id"),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
