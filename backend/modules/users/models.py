"""
User module data models.

Preference groups are explicit structs so malformed values are rejected
when they arrive instead of being stored and degraded on read. The
field names double as the update whitelists used by the repository.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """Roles known to the service. Extend here to add new ones."""

    ADMIN = "admin"
    USER = "user"


def normalize_email(email: str) -> str:
    """Lower-case and trim an email before any lookup or write."""
    return email.strip().lower()


class DisplayPreferences(BaseModel):
    """General look of the application."""

    model_config = ConfigDict(extra="ignore")

    theme: Optional[str] = None
    section_config: Optional[str | dict[str, Any] | list[Any]] = None
    collapsed_sections: Optional[list[str]] = None
    grid_font_size: Optional[int] = None


class ScheduleViewPreferences(BaseModel):
    """Schedule grid settings."""

    model_config = ConfigDict(extra="ignore")

    schedule_hidden_rows: Optional[list[str]] = None
    schedule_show_sidebar: Optional[bool] = None
    highlight_my_name: Optional[bool] = None


class WishViewPreferences(BaseModel):
    """Wish overview settings."""

    model_config = ConfigDict(extra="ignore")

    wish_show_occupied: Optional[bool] = None
    wish_show_absences: Optional[bool] = None
    wish_hidden_doctors: Optional[list[str]] = None


class SelfProfileUpdate(DisplayPreferences, ScheduleViewPreferences, WishViewPreferences):
    """
    Fields a user may change on their own account.

    Unknown keys (role, is_active, password_hash, ...) are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None


class AdminUserUpdate(SelfProfileUpdate):
    """Fields an administrator may change on any account."""

    role: Optional[UserRole] = None
    doctor_id: Optional[str] = None
    is_active: Optional[bool] = None
    must_change_password: Optional[bool] = None
    password: Optional[str] = Field(None, description="Plain-text reset, hashed before storage")


SELF_UPDATABLE_FIELDS = frozenset(SelfProfileUpdate.model_fields)
ADMIN_UPDATABLE_FIELDS = frozenset(AdminUserUpdate.model_fields) - {"password"}

# Columns holding JSON text; parsed back into structures on read.
JSON_FIELDS = (
    "section_config",
    "collapsed_sections",
    "schedule_hidden_rows",
    "wish_hidden_doctors",
)

# Columns that may come back as 0/1 and are always exposed as booleans.
BOOL_FIELDS = (
    "schedule_show_sidebar",
    "highlight_my_name",
    "wish_show_occupied",
    "wish_show_absences",
    "is_active",
    "must_change_password",
    "email_verified",
)
