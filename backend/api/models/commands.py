"""
Request commands for the auth endpoint.

The endpoint multiplexes on the `action` field. Each action is its own
model and the union is discriminated on `action`, so parsing a body
yields exactly one typed command.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter

from modules.users.models import UserRole


def _looks_like_email(value: str) -> str:
    if "@" not in value:
        raise ValueError("not an email address")
    return value


EmailAddress = Annotated[str, Field(min_length=1), AfterValidator(_looks_like_email)]


class _Command(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LoginCommand(_Command):
    action: Literal["login"]
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterCommand(_Command):
    action: Literal["register"]
    email: EmailAddress
    password: str = Field(..., min_length=1)
    full_name: Optional[str] = ""
    role: UserRole = UserRole.USER
    doctor_id: Optional[str] = None


class MeCommand(_Command):
    action: Literal["me"]


class UpdateMeCommand(_Command):
    action: Literal["updateMe"]
    data: dict[str, Any] = Field(default_factory=dict)


class ChangePasswordCommand(_Command):
    action: Literal["changePassword"]
    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=1, alias="newPassword")


class ChangeEmailCommand(_Command):
    action: Literal["changeEmail"]
    new_email: EmailAddress = Field(..., alias="newEmail")
    password: str = Field(..., min_length=1)


class ListUsersCommand(_Command):
    action: Literal["listUsers"]


class UpdateUserCommand(_Command):
    action: Literal["updateUser"]
    user_id: str = Field(..., min_length=1, alias="userId")
    data: dict[str, Any]


class DeleteUserCommand(_Command):
    action: Literal["deleteUser"]
    user_id: str = Field(..., min_length=1, alias="userId")


class SendPasswordEmailCommand(_Command):
    action: Literal["sendPasswordEmail"]
    user_id: str = Field(..., min_length=1, alias="userId")


class EmailVerificationStatusCommand(_Command):
    action: Literal["emailVerificationStatus"]
    user_id: str = Field(..., min_length=1, alias="userId")


class SmtpCheckCommand(_Command):
    action: Literal["testEmail"]


class VerifyCommand(_Command):
    action: Literal["verify"]


Command = Annotated[
    Union[
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
    ],
    Field(discriminator="action"),
]

command_adapter: TypeAdapter[Command] = TypeAdapter(Command)
