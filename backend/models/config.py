import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so `SECRET_KEY` can be
    provided from `backend/.env`. **SECRET_KEY remains required** and must be
    set in production via environment variables.

    Do NOT auto-load `.env` when running under pytest or in CI.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'production', or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/community.db"
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="Signs session cookies and OAuth state - must be set via SECRET_KEY",
    )
    ALGORITHM: str = "HS256"
    CORS_ORIGINS: List[str] = Field(
        default=["http://127.0.0.1:5500", "http://localhost:5500"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Session cookie
    SESSION_COOKIE_NAME: str = Field(
        default="connect.sid",
        description="Name of the cookie carrying the signed session id",
    )
    SESSION_MAX_AGE_SECONDS: int = Field(
        default=24 * 60 * 60,
        description="Session lifetime in seconds",
    )
    SESSION_ROLLING: bool = Field(
        default=True,
        description="Refresh session expiry on every authenticated request",
    )
    OAUTH_STATE_COOKIE_NAME: str = "oauth_state"
    OAUTH_STATE_MAX_AGE_SECONDS: int = 10 * 60

    # Google OAuth
    GOOGLE_CLIENT_ID: str = Field(default="", description="Google OAuth client id")
    GOOGLE_CLIENT_SECRET: str = Field(
        default="", description="Google OAuth client secret"
    )
    GOOGLE_REDIRECT_URI: str = Field(
        default="http://127.0.0.1:3000/api/auth/google/callback",
        description="Callback URL registered with Google",
    )
    FRONTEND_URL: str = Field(
        default="http://127.0.0.1:5500",
        description="Frontend base URL used for OAuth redirects",
    )
    OAUTH_SUCCESS_PATH: str = "/frontend/pages/community.html"
    OAUTH_FAILURE_PATH: str = "/frontend/pages/login.html"

    # Seed data (used by init_db.py)
    ADMIN_EMAIL: str = Field(
        ...,  # Required, no default
        description="Community admin email - must be set via ADMIN_EMAIL",
    )
    ADMIN_PASSWORD: str = Field(
        ...,  # Required, no default
        description="Community admin password - must be set via ADMIN_PASSWORD",
    )
    COMMUNITY_NAME: str = "MConnect - Mining Community"
    COMMUNITY_DESCRIPTION: str = (
        "Welcome to MConnect, the premier platform for mining professionals."
    )

    # Uploads
    UPLOAD_DIR: str = Field(
        default="data/uploads",
        description="Directory where post images and avatars are stored",
    )
    MAX_UPLOAD_SIZE: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum size of a single uploaded image in bytes",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    # Safety: avoid creating DB schema automatically unless explicitly enabled.
    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    # Performance settings
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


# Instantiating Settings() raises pydantic.ValidationError if SECRET_KEY or the
# admin credentials are missing.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
