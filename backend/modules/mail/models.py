"""Mail module data models."""

from pydantic import BaseModel, Field


class OutgoingEmail(BaseModel):
    """A message ready for delivery."""

    to: str = Field(..., description="Recipient address")
    subject: str
    text: str = Field(..., description="Plain-text body")
    html: str = Field(..., description="HTML body")
