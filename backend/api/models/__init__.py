"""API models package."""

from .commands import (
    Command,
    command_adapter,
    LoginCommand,
    RegisterCommand,
    MeCommand,
    UpdateMeCommand,
    ChangePasswordCommand,
    ChangeEmailCommand,
    ListUsersCommand,
    UpdateUserCommand,
    DeleteUserCommand,
    SendPasswordEmailCommand,
    EmailVerificationStatusCommand,
    SmtpCheckCommand,
    VerifyCommand,
)
from .errors import ErrorResponse

__all__ = [
    "Command",
    "command_adapter",
    "LoginCommand",
    "RegisterCommand",
    "MeCommand",
    "UpdateMeCommand",
    "ChangePasswordCommand",
    "ChangeEmailCommand",
    "ListUsersCommand",
    "UpdateUserCommand",
    "DeleteUserCommand",
    "SendPasswordEmailCommand",
    "EmailVerificationStatusCommand",
    "SmtpCheckCommand",
    "VerifyCommand",
    "ErrorResponse",
]
