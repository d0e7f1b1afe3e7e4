"""Tests for the create_admin command."""

from create_admin import create_admin


class TestCreateAdmin:
    def test_creates_new_admin(self, users, credentials):
        user = create_admin(users, credentials, " Root@X.com", "initialpw", "Root")

        assert user["email"] == "root@x.com"
        assert user["role"] == "admin"
        assert user["must_change_password"]
        assert credentials.verify("initialpw", user["password_hash"])

    def test_resets_existing_account(self, users, credentials, regular_user):
        users.soft_delete("user-1")

        user = create_admin(users, credentials, "user@x.com", "initialpw", "Promoted")

        assert user["id"] == "user-1"
        assert user["role"] == "admin"
        assert user["is_active"]
        assert user["must_change_password"]
        assert user["full_name"] == "Promoted"
        assert len(users.rows) == 1
