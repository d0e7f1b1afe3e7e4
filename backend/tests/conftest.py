"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import time
from unittest.mock import MagicMock

import pytest

from api.dependencies import reset_container
from api.dispatch import RequestRouter
from modules.auth.gate import AuthorizationGate
from modules.auth.passwords import CredentialStore
from modules.auth.tokens import TokenCodec
from modules.users.audit import AuditLogger
from modules.users.service import UserService
from shared.config import get_settings

from tests.fakes import (
    InMemoryEmailVerifications,
    InMemorySystemLog,
    InMemoryUserRepository,
    RecordingMailer,
)


# Test signing secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"

# Lowest cost bcrypt accepts; keeps the suite fast
TEST_BCRYPT_ROUNDS = 4

LOGIN_URL = "https://app.curaflow.test"
PUBLIC_API_URL = "https://api.curaflow.test"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    role: str = "user",
    doctor_id: str | None = None,
    expired: bool = False,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a signed token for authentication in tests.

    Args:
        user_id: Subject claim
        email: Email claim
        role: Role claim
        doctor_id: Linked doctor claim
        expired: If True, the token was issued two days ago
        secret: Signing secret
    """
    issued = time.time() - (2 * 86400 if expired else 0)
    codec = TokenCodec(secret, clock=lambda: issued)
    return codec.create({"sub": user_id, "email": email, "role": role, "doctor_id": doctor_id})


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the service container and settings cache around each test."""
    reset_container()
    get_settings.cache_clear()
    yield
    reset_container()
    get_settings.cache_clear()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_JWT_SECRET)


@pytest.fixture
def credentials() -> CredentialStore:
    return CredentialStore(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def system_log() -> InMemorySystemLog:
    return InMemorySystemLog()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def verifications() -> InMemoryEmailVerifications:
    return InMemoryEmailVerifications()


@pytest.fixture
def service(users, credentials, codec, system_log, mailer, verifications) -> UserService:
    return UserService(
        users=users,
        credentials=credentials,
        codec=codec,
        audit=AuditLogger(users, system_log),
        mailer=mailer,
        verifications=verifications,
        login_url=LOGIN_URL,
        public_api_url=PUBLIC_API_URL + "/",
    )


@pytest.fixture
def connections() -> list[MagicMock]:
    """Every connection handed out by the test connection factory."""
    return []


@pytest.fixture
def request_router(codec, service, connections) -> RequestRouter:
    def connect():
        conn = MagicMock(name="connection")
        connections.append(conn)
        return conn

    return RequestRouter(
        gate=AuthorizationGate(codec),
        connection_factory=connect,
        service_factory=lambda conn: service,
    )


@pytest.fixture
def admin_user(users, credentials) -> dict:
    return users.add(
        id="admin-1",
        email="admin@x.com",
        password_hash=credentials.hash("secret123"),
        full_name="Admin",
        role="admin",
    )


@pytest.fixture
def regular_user(users, credentials) -> dict:
    return users.add(
        id="user-1",
        email="user@x.com",
        password_hash=credentials.hash("userpass1"),
        full_name="Regular User",
        role="user",
        doctor_id="doc-7",
    )


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    token = create_test_token(user_id=admin_user["id"], email=admin_user["email"], role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(regular_user) -> dict[str, str]:
    token = create_test_token(
        user_id=regular_user["id"],
        email=regular_user["email"],
        role="user",
        doctor_id=regular_user["doctor_id"],
    )
    return {"Authorization": f"Bearer {token}"}
