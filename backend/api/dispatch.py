"""
Request router for the single auth endpoint.

Parses the body into a command, opens one store connection for the
request, enforces authentication and role requirements, runs the
handler, and shapes the result as `(status, payload)`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from modules.auth.gate import AuthorizationGate
from modules.auth.models import VerifyResponse
from modules.users.models import UserRole
from modules.users.service import UserService
from shared.database import ConnectionFactory, scoped_connection
from shared.exceptions import CuraFlowError, ValidationError
from shared.models import AuthenticatedUser

from .models.commands import (
    ChangeEmailCommand,
    ChangePasswordCommand,
    Command,
    DeleteUserCommand,
    EmailVerificationStatusCommand,
    LoginCommand,
    RegisterCommand,
    SendPasswordEmailCommand,
    UpdateMeCommand,
    UpdateUserCommand,
    command_adapter,
)

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[Any], UserService]
Handler = Callable[[UserService, Optional[AuthenticatedUser], Any], Any]


@dataclass(frozen=True)
class Route:
    """How one action is authorized and answered."""

    handler: Handler
    authenticated: bool = False
    role: Optional[str] = None
    status: int = 200


def _login(service: UserService, caller: None, cmd: LoginCommand) -> dict:
    return service.login(cmd.email, cmd.password)


def _register(service: UserService, caller: AuthenticatedUser, cmd: RegisterCommand) -> dict:
    return service.register(
        email=cmd.email,
        password=cmd.password,
        full_name=cmd.full_name or "",
        role=cmd.role,
        doctor_id=cmd.doctor_id,
    )


def _me(service: UserService, caller: AuthenticatedUser, cmd: Command) -> dict:
    return service.me(caller)


def _update_me(service: UserService, caller: AuthenticatedUser, cmd: UpdateMeCommand) -> dict:
    return service.update_me(caller, cmd.data)


def _change_password(
    service: UserService, caller: AuthenticatedUser, cmd: ChangePasswordCommand
) -> dict:
    return service.change_password(caller, cmd.current_password, cmd.new_password)


def _change_email(service: UserService, caller: AuthenticatedUser, cmd: ChangeEmailCommand) -> dict:
    return service.change_email(caller, cmd.new_email, cmd.password)


def _list_users(service: UserService, caller: AuthenticatedUser, cmd: Command) -> list:
    return service.list_users()


def _update_user(service: UserService, caller: AuthenticatedUser, cmd: UpdateUserCommand) -> dict:
    return service.update_user(cmd.user_id, cmd.data)


def _delete_user(service: UserService, caller: AuthenticatedUser, cmd: DeleteUserCommand) -> dict:
    return service.delete_user(caller, cmd.user_id)


def _send_password_email(
    service: UserService, caller: AuthenticatedUser, cmd: SendPasswordEmailCommand
) -> dict:
    return service.send_password_email(caller, cmd.user_id)


def _email_verification_status(
    service: UserService, caller: AuthenticatedUser, cmd: EmailVerificationStatusCommand
) -> dict:
    return service.email_verification_status(cmd.user_id)


def _test_email(service: UserService, caller: AuthenticatedUser, cmd: Command) -> dict:
    return service.send_test_email(caller)


UNKNOWN_TAG_ERRORS = ("union_tag_invalid", "union_tag_not_found")

ADMIN = UserRole.ADMIN.value

ROUTES: dict[str, Route] = {
    "login": Route(_login),
    "register": Route(_register, authenticated=True, role=ADMIN, status=201),
    "me": Route(_me, authenticated=True),
    "updateMe": Route(_update_me, authenticated=True),
    "changePassword": Route(_change_password, authenticated=True),
    "changeEmail": Route(_change_email, authenticated=True),
    "listUsers": Route(_list_users, authenticated=True, role=ADMIN),
    "updateUser": Route(_update_user, authenticated=True, role=ADMIN),
    "deleteUser": Route(_delete_user, authenticated=True, role=ADMIN),
    "sendPasswordEmail": Route(_send_password_email, authenticated=True, role=ADMIN),
    "emailVerificationStatus": Route(_email_verification_status, authenticated=True, role=ADMIN),
    "testEmail": Route(_test_email, authenticated=True, role=ADMIN),
}


def parse_command(body: Any) -> Command:
    """
    Turn a raw JSON body into a typed command.

    Raises:
        ValidationError: Unknown action or missing/ill-formed fields
    """
    if not isinstance(body, dict) or not isinstance(body.get("action"), str):
        raise ValidationError("Unknown action")

    try:
        return command_adapter.validate_python(body)
    except PydanticValidationError as e:
        if any(err["type"] in UNKNOWN_TAG_ERRORS for err in e.errors()):
            raise ValidationError("Unknown action")
        fields = sorted({str(err["loc"][-1]) for err in e.errors() if len(err["loc"]) > 1})
        message = f"Missing or invalid fields: {', '.join(fields)}" if fields else "Invalid request"
        raise ValidationError(message)


class RequestRouter:
    """
    Single entry point for every auth action.

    The connection is opened once per request and closed on every exit
    path. Anything that is not a CuraFlowError becomes a 500 carrying
    only the exception message.
    """

    def __init__(
        self,
        gate: AuthorizationGate,
        connection_factory: ConnectionFactory,
        service_factory: ServiceFactory,
    ):
        self._gate = gate
        self._connection_factory = connection_factory
        self._service_factory = service_factory

    def handle(self, body: Any, headers: Mapping[str, str]) -> tuple[int, Any]:
        try:
            command = parse_command(body)

            if command.action == "verify":
                return 200, self._verify(headers)

            route = ROUTES[command.action]
            with scoped_connection(self._connection_factory) as conn:
                caller = self._authorize(route, headers)
                service = self._service_factory(conn)
                return route.status, route.handler(service, caller, command)

        except CuraFlowError as e:
            logger.debug(f"{e.code}: {e.message}")
            return e.status_code, e.to_dict()
        except Exception as e:
            logger.exception("Unhandled error in auth request")
            return 500, {"error": str(e)}

    def _authorize(self, route: Route, headers: Mapping[str, str]) -> Optional[AuthenticatedUser]:
        if not route.authenticated:
            return None

        caller = self._gate.require_authenticated(self._gate.extract_bearer_token(headers))
        if route.role:
            self._gate.require_role(caller, route.role)
        return caller

    def _verify(self, headers: Mapping[str, str]) -> dict:
        token = self._gate.extract_bearer_token(headers)
        payload = self._gate.verify(token) if token else None
        return VerifyResponse(valid=payload is not None, payload=payload).model_dump()

    def confirm_email(self, token: Optional[str]) -> tuple[int, str]:
        """
        Consume an email verification link.

        Returns:
            `(status, outcome)` where outcome is "verified",
            "already_verified" or the error code
        """
        try:
            with scoped_connection(self._connection_factory) as conn:
                return 200, self._service_factory(conn).verify_email(token)
        except CuraFlowError as e:
            return e.status_code, e.code
        except Exception:
            logger.exception("Unhandled error while verifying an email")
            return 500, "INTERNAL_ERROR"
