"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together the token
codec, credential store, connection factory and request router. Values
that are process-wide (the signing secret, the bcrypt cost) are built
once; everything bound to a database connection is built per request.
"""

from typing import TYPE_CHECKING, Any

from shared.config import Settings, get_settings

# Type checking imports (avoids import cycles at module load)
if TYPE_CHECKING:
    from modules.auth.gate import AuthorizationGate
    from modules.auth.passwords import CredentialStore
    from modules.auth.tokens import TokenCodec
    from modules.mail import IMailer
    from modules.users.service import UserService
    from shared.database import ConnectionFactory
    from .dispatch import RequestRouter


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as
    singletons within the container. Use reset() to clear them in tests.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._token_codec: "TokenCodec | None" = None
        self._credential_store: "CredentialStore | None" = None
        self._gate: "AuthorizationGate | None" = None
        self._connection_factory: "ConnectionFactory | None" = None
        self._mailer: "IMailer | None" = None
        self._request_router: "RequestRouter | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def token_codec(self) -> "TokenCodec":
        """Get the token codec, bound to the configured secret."""
        if self._token_codec is None:
            from modules.auth.tokens import TokenCodec
            self._token_codec = TokenCodec(
                self.settings.jwt_secret,
                lifetime_seconds=self.settings.token_lifetime_seconds,
            )
        return self._token_codec

    @property
    def credential_store(self) -> "CredentialStore":
        if self._credential_store is None:
            from modules.auth.passwords import CredentialStore
            self._credential_store = CredentialStore(rounds=self.settings.bcrypt_rounds)
        return self._credential_store

    @property
    def gate(self) -> "AuthorizationGate":
        if self._gate is None:
            from modules.auth.gate import AuthorizationGate
            self._gate = AuthorizationGate(self.token_codec)
        return self._gate

    @property
    def connection_factory(self) -> "ConnectionFactory":
        if self._connection_factory is None:
            from shared.database import connect
            database_url = self.settings.database_url
            self._connection_factory = lambda: connect(database_url)
        return self._connection_factory

    @property
    def mailer(self) -> "IMailer | None":
        """Get the SMTP mailer, or None while SMTP_HOST is unset."""
        if self._mailer is None and self.settings.smtp_host:
            from modules.mail import SmtpMailer
            self._mailer = SmtpMailer(
                host=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_user,
                password=self.settings.smtp_password,
                sender=self.settings.smtp_from,
                starttls=self.settings.smtp_starttls,
                timeout=self.settings.smtp_timeout_seconds,
            )
        return self._mailer

    def user_service(self, conn: Any) -> "UserService":
        """Build the user service for one request's connection."""
        from modules.users.audit import AuditLogger
        from modules.users.repository import (
            EmailVerificationRepository,
            SystemLogRepository,
            UserRepository,
        )
        from modules.users.service import UserService

        users = UserRepository(conn)
        system_log = SystemLogRepository(conn) if self.settings.audit_to_database else None
        return UserService(
            users=users,
            credentials=self.credential_store,
            codec=self.token_codec,
            audit=AuditLogger(users, system_log),
            min_password_length=self.settings.min_password_length,
            mailer=self.mailer,
            verifications=EmailVerificationRepository(conn),
            login_url=self.settings.frontend_url,
            public_api_url=self.settings.public_api_url,
            verification_ttl_days=self.settings.email_verification_ttl_days,
        )

    @property
    def request_router(self) -> "RequestRouter":
        """Get the request router instance."""
        if self._request_router is None:
            from .dispatch import RequestRouter
            self._request_router = RequestRouter(
                gate=self.gate,
                connection_factory=self.connection_factory,
                service_factory=self.user_service,
            )
        return self._request_router

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different settings.
        """
        self._token_codec = None
        self._credential_store = None
        self._gate = None
        self._connection_factory = None
        self._mailer = None
        self._request_router = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_request_router() -> "RequestRouter":
    """FastAPI dependency for the auth request router."""
    return get_container().request_router
