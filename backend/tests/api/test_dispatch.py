"""
Tests for the auth request router.

Exercises every action end to end against the in-memory repository.
"""

from unittest.mock import MagicMock

import pytest

from api.dispatch import ROUTES, RequestRouter, parse_command
from api.models.commands import ChangePasswordCommand, LoginCommand
from modules.auth.gate import AuthorizationGate
from shared.exceptions import ValidationError

from tests.conftest import create_test_token


class TestParseCommand:
    def test_login(self):
        command = parse_command({"action": "login", "email": "a@b.com", "password": "x"})
        assert isinstance(command, LoginCommand)

    def test_camel_case_fields(self):
        command = parse_command(
            {"action": "changePassword", "currentPassword": "old", "newPassword": "newpass12"}
        )
        assert isinstance(command, ChangePasswordCommand)
        assert command.current_password == "old"
        assert command.new_password == "newpass12"

    @pytest.mark.parametrize("body", [{}, {"action": "explode"}, {"action": 5}, [], "login", None])
    def test_unknown_action(self, body):
        with pytest.raises(ValidationError) as exc_info:
            parse_command(body)
        assert exc_info.value.message == "Unknown action"

    def test_missing_fields_named(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_command({"action": "login", "email": "a@b.com"})
        assert exc_info.value.message == "Missing or invalid fields: password"

    def test_empty_fields_rejected(self):
        with pytest.raises(ValidationError):
            parse_command({"action": "login", "email": "", "password": ""})

    def test_register_requires_email_shape(self):
        with pytest.raises(ValidationError):
            parse_command({"action": "register", "email": "no-at-sign", "password": "p12345678"})

    @pytest.mark.parametrize("action", sorted(ROUTES))
    def test_every_routed_action_is_known(self, action):
        try:
            command = parse_command({"action": action})
        except ValidationError as e:
            assert e.message.startswith("Missing or invalid fields")
        else:
            assert command.action == action


class TestLogin:
    def test_scenario(self, request_router, admin_user):
        """Mixed-case, padded email logs in against the normalized row."""
        status, body = request_router.handle(
            {"action": "login", "email": "Admin@X.com ", "password": "secret123"}, {}
        )
        assert status == 200
        assert set(body) == {"token", "user", "must_change_password"}
        assert "password_hash" not in body["user"]

    def test_wrong_password(self, request_router, admin_user):
        status, body = request_router.handle(
            {"action": "login", "email": "admin@x.com", "password": "nope"}, {}
        )
        assert status == 401
        assert body == {"error": "Invalid credentials"}

    def test_missing_password(self, request_router):
        status, body = request_router.handle({"action": "login", "email": "admin@x.com"}, {})
        assert status == 400
        assert "error" in body


class TestRegister:
    def test_requires_token(self, request_router):
        status, _ = request_router.handle({"action": "register", "email": "a@b.com", "password": "p12345678"}, {})
        assert status == 401

    def test_requires_admin(self, request_router, user_headers, users):
        status, _ = request_router.handle(
            {"action": "register", "email": "a@b.com", "password": "p12345678"}, user_headers
        )
        assert status == 403
        assert users.find_any_by_email("a@b.com") == []

    def test_insert(self, request_router, admin_headers):
        status, body = request_router.handle(
            {"action": "register", "email": "new@x.com", "password": "p12345678", "full_name": "New"},
            admin_headers,
        )
        assert status == 201
        assert body["user"]["email"] == "new@x.com"

    def test_reactivation_scenario(self, request_router, admin_headers, users):
        users.add(id="u1", email="a@b.com", is_active=0)
        status, body = request_router.handle(
            {"action": "register", "email": "a@b.com", "password": "p12345678"}, admin_headers
        )
        assert status == 201
        assert body["user"]["id"] == "u1"
        assert body["user"]["is_active"] is True

    def test_conflict(self, request_router, admin_headers, regular_user):
        status, body = request_router.handle(
            {"action": "register", "email": "USER@x.com", "password": "p12345678"}, admin_headers
        )
        assert status == 409
        assert body == {"error": "User already exists"}

    def test_short_password(self, request_router, admin_headers):
        status, _ = request_router.handle(
            {"action": "register", "email": "n@x.com", "password": "short"}, admin_headers
        )
        assert status == 400


class TestSelfService:
    def test_me(self, request_router, user_headers):
        status, body = request_router.handle({"action": "me"}, user_headers)
        assert status == 200
        assert body["id"] == "user-1"
        assert "password_hash" not in body

    def test_me_expired_token(self, request_router, regular_user):
        token = create_test_token(user_id="user-1", expired=True)
        status, body = request_router.handle({"action": "me"}, {"Authorization": f"Bearer {token}"})
        assert status == 401
        assert body == {"error": "Token is invalid or expired"}

    def test_update_me_role_injection(self, request_router, user_headers, users):
        status, _ = request_router.handle({"action": "updateMe", "data": {"role": "admin"}}, user_headers)
        assert status == 400
        assert users.rows["user-1"]["role"] == "user"

    def test_update_me(self, request_router, user_headers):
        status, body = request_router.handle(
            {"action": "updateMe", "data": {"theme": "dark", "wish_hidden_doctors": ["d1"]}}, user_headers
        )
        assert status == 200
        assert body["theme"] == "dark"
        assert body["wish_hidden_doctors"] == ["d1"]

    def test_change_password_wrong_current(self, request_router, user_headers, users):
        """Wrong current password gives 401 and leaves the hash alone."""
        before = users.rows["user-1"]["password_hash"]
        status, _ = request_router.handle(
            {"action": "changePassword", "currentPassword": "wrong", "newPassword": "newpass1"},
            user_headers,
        )
        assert status == 401
        assert users.rows["user-1"]["password_hash"] == before

    def test_change_password(self, request_router, user_headers):
        status, body = request_router.handle(
            {"action": "changePassword", "currentPassword": "userpass1", "newPassword": "newpass1"},
            user_headers,
        )
        assert (status, body) == (200, {"success": True})

    def test_change_email_conflict(self, request_router, user_headers, admin_user):
        status, _ = request_router.handle(
            {"action": "changeEmail", "newEmail": "admin@x.com", "password": "userpass1"}, user_headers
        )
        assert status == 409


class TestAdministration:
    def test_list_users_role_gate(self, request_router, user_headers, admin_headers):
        status, _ = request_router.handle({"action": "listUsers"}, user_headers)
        assert status == 403

        status, body = request_router.handle({"action": "listUsers"}, admin_headers)
        assert status == 200
        assert len(body) == 2
        assert all("password_hash" not in u for u in body)

    def test_update_user(self, request_router, admin_headers, regular_user):
        status, body = request_router.handle(
            {"action": "updateUser", "userId": "user-1", "data": {"role": "admin"}}, admin_headers
        )
        assert status == 200
        assert body["role"] == "admin"

    def test_update_user_not_found(self, request_router, admin_headers):
        status, _ = request_router.handle(
            {"action": "updateUser", "userId": "ghost", "data": {"full_name": "X"}}, admin_headers
        )
        assert status == 404

    def test_update_user_requires_data(self, request_router, admin_headers):
        status, _ = request_router.handle({"action": "updateUser", "userId": "user-1"}, admin_headers)
        assert status == 400

    def test_delete_user_twice(self, request_router, admin_headers, users, regular_user):
        body = {"action": "deleteUser", "userId": "user-1"}
        assert request_router.handle(body, admin_headers) == (200, {"success": True})
        assert request_router.handle(body, admin_headers) == (200, {"success": True})
        assert users.rows["user-1"]["is_active"] is False

    def test_delete_user_requires_admin(self, request_router, user_headers, users, admin_user):
        status, _ = request_router.handle({"action": "deleteUser", "userId": "admin-1"}, user_headers)
        assert status == 403
        assert users.rows["admin-1"]["is_active"]


class TestVerify:
    def test_valid(self, request_router, user_headers):
        status, body = request_router.handle({"action": "verify"}, user_headers)
        assert status == 200
        assert body["valid"] is True
        assert body["payload"]["sub"] == "user-1"

    def test_missing_header(self, request_router):
        assert request_router.handle({"action": "verify"}, {}) == (200, {"valid": False, "payload": None})

    def test_garbage_token(self, request_router):
        status, body = request_router.handle({"action": "verify"}, {"Authorization": "Bearer a.b.c"})
        assert (status, body["valid"]) == (200, False)


class TestAccountEmails:
    def test_send_password_email(self, request_router, admin_headers, mailer, users, regular_user):
        status, body = request_router.handle({"action": "sendPasswordEmail", "userId": "user-1"}, admin_headers)
        assert (status, body) == (200, {"success": True, "message": "Password email sent to user@x.com"})
        assert mailer.sent[0].to == "user@x.com"
        assert users.rows["user-1"]["must_change_password"] is True

    def test_send_password_email_requires_admin(self, request_router, user_headers, mailer):
        status, _ = request_router.handle({"action": "sendPasswordEmail", "userId": "user-1"}, user_headers)
        assert status == 403
        assert mailer.sent == []

    def test_send_password_email_requires_user_id(self, request_router, admin_headers):
        status, body = request_router.handle({"action": "sendPasswordEmail"}, admin_headers)
        assert status == 400
        assert body == {"error": "Missing or invalid fields: userId"}

    def test_send_password_email_unknown_user(self, request_router, admin_headers):
        status, _ = request_router.handle({"action": "sendPasswordEmail", "userId": "ghost"}, admin_headers)
        assert status == 404

    def test_email_verification_status(self, request_router, admin_headers, regular_user):
        status, body = request_router.handle(
            {"action": "emailVerificationStatus", "userId": "user-1"}, admin_headers
        )
        assert status == 200
        assert body == {"email_verified": False, "email_verified_date": None, "last_verification": None}

    def test_test_email(self, request_router, admin_headers, mailer):
        status, body = request_router.handle({"action": "testEmail"}, admin_headers)
        assert (status, body["success"]) == (200, True)
        assert mailer.sent[0].to == "admin@x.com"

    def test_test_email_requires_admin(self, request_router, user_headers, mailer):
        status, _ = request_router.handle({"action": "testEmail"}, user_headers)
        assert status == 403
        assert mailer.sent == []


class TestResourceDiscipline:
    def test_connection_closed_on_success(self, request_router, connections, admin_user):
        request_router.handle({"action": "login", "email": "admin@x.com", "password": "secret123"}, {})
        [conn] = connections
        conn.close.assert_called_once()

    def test_connection_closed_on_domain_error(self, request_router, connections):
        request_router.handle({"action": "me"}, {})
        [conn] = connections
        conn.close.assert_called_once()

    def test_unexpected_error_becomes_500(self, codec, connections):
        def connect():
            conn = MagicMock()
            connections.append(conn)
            return conn

        def broken_service(conn):
            raise RuntimeError("database went away")

        router = RequestRouter(AuthorizationGate(codec), connect, broken_service)
        status, body = router.handle({"action": "login", "email": "a@b.com", "password": "x"}, {})

        assert (status, body) == (500, {"error": "database went away"})
        connections[0].close.assert_called_once()

    def test_connection_failure_becomes_500(self, codec):
        def refuse():
            raise ConnectionError("could not connect to server")

        router = RequestRouter(AuthorizationGate(codec), refuse, lambda conn: None)
        assert router.handle({"action": "me"}, {}) == (500, {"error": "could not connect to server"})
