# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SECRET_KEY)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Secrets are read once here and handed to services at construction time.
# Nothing below app/ reads the environment on its own.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Public development secret; production refuses to start with it
DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default=DEFAULT_SECRET_KEY,
        min_length=16,
        description="Secret key for signing access tokens"
    )

    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256",
        description="HMAC algorithm used to sign access tokens"
    )

    TOKEN_LIFETIME_DAYS: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Days before an issued access token expires"
    )

    PASSWORD_HASH_SCHEMES: str = Field(
        default="pbkdf2_sha256",
        description="passlib schemes for password hashing (comma-separated, first is default)"
    )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    STORE_BACKEND: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Document store backend (in-process memory or Supabase)"
    )

    SUPABASE_URL: str | None = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str | None = Field(
        default=None,
        description="Supabase service_role key (bypasses RLS)"
    )

    # -------------------------------------------------------------------------
    # Rate Limiting (per client IP, sliding window)
    # -------------------------------------------------------------------------

    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Reject clients that exceed the limits below with 429"
    )

    RATE_LIMIT_GENERAL_MAX: int = Field(default=100, ge=1)
    RATE_LIMIT_GENERAL_WINDOW_SECONDS: int = Field(default=900, ge=1)

    RATE_LIMIT_AUTH_MAX: int = Field(
        default=5,
        ge=1,
        description="Requests to /api/auth per window"
    )
    RATE_LIMIT_AUTH_WINDOW_SECONDS: int = Field(default=900, ge=1)

    RATE_LIMIT_TODO_CREATE_MAX: int = Field(
        default=10,
        ge=1,
        description="POST /api/todos per window"
    )
    RATE_LIMIT_TODO_CREATE_WINDOW_SECONDS: int = Field(default=60, ge=1)

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Metrics & Alerting
    # -------------------------------------------------------------------------

    ALERTS_ENABLED: bool = Field(
        default=True,
        description="Send webhook notifications when alert thresholds are crossed"
    )

    ALERT_AUTH_FAILURES: int = Field(
        default=10,
        ge=1,
        description="Authentication failures per window before alerting"
    )

    ALERT_DUPLICATE_EMAILS: int = Field(
        default=20,
        ge=1,
        description="Duplicate registration attempts per window before alerting"
    )

    ALERT_ERROR_RATE: float = Field(
        default=0.05,
        gt=0.0,
        le=1.0,
        description="Server error ratio per window before alerting"
    )

    ALERT_MIN_REQUESTS: int = Field(
        default=100,
        ge=1,
        description="Requests required in a window before the error rate is evaluated"
    )

    SLOW_REQUEST_MS: int = Field(
        default=2000,
        ge=1,
        description="Requests slower than this are logged and counted"
    )

    METRICS_RESET_INTERVAL_SECONDS: int = Field(
        default=3600,
        ge=1,
        description="How often advisory counters are reset"
    )

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    SLACK_WEBHOOK_URL: str | None = Field(default=None)
    SLACK_CHANNEL: str = Field(default="#alerts")
    SLACK_USERNAME: str = Field(default="Todo App Alerts")

    TEAMS_WEBHOOK_URL: str | None = Field(default=None)
    TEAMS_TITLE: str = Field(default="Todo App Alerts")

    DISCORD_WEBHOOK_URL: str | None = Field(default=None)
    DISCORD_USERNAME: str = Field(default="Todo App Alerts")

    CUSTOM_WEBHOOKS: str = Field(
        default="",
        description="Extra webhooks as name=url pairs (comma-separated)"
    )

    WEBHOOK_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for webhook delivery"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_supabase_credentials(self) -> "Settings":
        if self.STORE_BACKEND == "supabase" and not (
            self.SUPABASE_URL and self.SUPABASE_SERVICE_KEY
        ):
            raise ValueError(
                "STORE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_SERVICE_KEY"
            )
        return self

    @model_validator(mode="after")
    def _check_production_secret(self) -> "Settings":
        if self.ENVIRONMENT == "production" and self.SECRET_KEY == DEFAULT_SECRET_KEY:
            raise ValueError(
                "SECRET_KEY must be set to a private value when ENVIRONMENT=production"
            )
        return self

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def password_hash_schemes_list(self) -> list[str]:
        """Parse PASSWORD_HASH_SCHEMES into a list of passlib scheme names."""
        return [s.strip() for s in self.PASSWORD_HASH_SCHEMES.split(",") if s.strip()]

    @property
    def custom_webhooks_list(self) -> list[tuple[str, str]]:
        """
        Parse CUSTOM_WEBHOOKS into (name, url) pairs.

        Example: "ops=https://a.example/hook, pager=https://b.example/hook"
        Entries without "=" are ignored.
        """
        pairs = []
        for entry in self.CUSTOM_WEBHOOKS.split(","):
            name, sep, url = entry.partition("=")
            if sep and name.strip() and url.strip():
                pairs.append((name.strip(), url.strip()))
        return pairs

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
