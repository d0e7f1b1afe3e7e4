"""
User administration module.

Persistence, lifecycle and self-service operations on user accounts.

Public API:
- UserService: Action handlers used by the request router
- UserRepository: SQL access to app_users
- AuditLogger: Records destructive admin actions
- sanitize_user: Strips secrets from rows before they leave the service
"""

from .models import UserRole, SelfProfileUpdate, AdminUserUpdate, normalize_email
from .repository import UserRepository, SystemLogRepository
from .audit import AuditLogger, AuditImage
from .sanitize import sanitize_user, sanitize_users
from .service import UserService
from .exceptions import (
    UserNotFoundError,
    UserAlreadyExistsError,
    EmailInUseError,
    NoUpdatableFieldsError,
)

__all__ = [
    "UserService",
    "UserRepository",
    "SystemLogRepository",
    "AuditLogger",
    "AuditImage",
    "UserRole",
    "SelfProfileUpdate",
    "AdminUserUpdate",
    "normalize_email",
    "sanitize_user",
    "sanitize_users",
    "UserNotFoundError",
    "UserAlreadyExistsError",
    "EmailInUseError",
    "NoUpdatableFieldsError",
]
