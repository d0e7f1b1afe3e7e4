"""
Centralized configuration for the CuraFlow auth backend.

All settings are loaded from environment variables with sensible defaults.
The token signing secret is read once per process and never mutated.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "CuraFlow Auth API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["*"]
    cors_allow_methods: list[str] = ["POST", "GET", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type", "Authorization"]

    # Database
    database_url: str = ""

    # Tokens
    jwt_secret: str = ""
    token_lifetime_seconds: int = 86400  # 24 hours

    # Credentials
    bcrypt_rounds: int = 12
    min_password_length: int = 8

    # Audit
    audit_to_database: bool = True

    # Email delivery (SMTP); sending is disabled while smtp_host is empty
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = "CuraFlow <noreply@curaflow.de>"
    smtp_starttls: bool = True
    smtp_timeout_seconds: int = 30

    # Links placed in outgoing emails
    frontend_url: str = "http://localhost:5173"
    public_api_url: str = "http://localhost:8000"
    email_verification_ttl_days: int = 7


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
