"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clockwork_auth.application.services.auth_config import AuthConfig, PasswordPolicy


class Settings(BaseSettings):
    """Application configuration - single source of truth.

    All settings loaded from environment variables or .env files.

    Usage:
        settings = get_settings()
        print(settings.database_url)
        config = settings.auth_config()
    """

    # Database
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="postgres")
    db_name: str = Field(default="clockwork")
    db_echo: bool = Field(default=False)
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    database_url_override: str = Field(
        default="",
        description="Full SQLAlchemy URL; replaces the db_* fields when set "
        "(e.g. sqlite+aiosqlite:///./dev.db).",
    )

    # Session store
    redis_url: str = Field(
        default="",
        description="Redis URL for the session store. Empty uses the in-process store.",
    )

    # Security
    secret_key: str = Field(default="", min_length=32)
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=15, gt=0)
    refresh_token_expire_days: int = Field(default=7, gt=0)
    two_factor_challenge_ttl_seconds: int = Field(default=300, gt=0)
    two_factor_setup_ttl_seconds: int = Field(default=600, gt=0)
    password_reset_ttl_seconds: int = Field(default=3600, gt=0)

    # Two-factor
    totp_issuer: str = Field(default="ClockWork Platform")
    totp_valid_window: int = Field(
        default=2,
        ge=0,
        description="Accepted clock drift in 30-second steps either way.",
    )
    backup_code_count: int = Field(default=8, gt=0)
    backup_code_ttl_days: int = Field(default=365, gt=0)

    # Password policy
    password_min_length: int = Field(default=8, ge=1)
    password_require_uppercase: bool = Field(default=True)
    password_require_lowercase: bool = Field(default=True)
    password_require_digit: bool = Field(default=True)
    password_require_special: bool = Field(default=True)

    # Notifications and audit
    side_effect_max_attempts: int = Field(default=3, ge=1)
    side_effect_backoff_seconds: float = Field(default=0.5, ge=0)

    # Application
    environment: Literal["dev", "prod", "test"] = Field(default="dev")
    debug: bool = Field(default=False)
    app_name: str = Field(default="ClockWork Auth")
    app_version: str = Field(default="1.0.0")

    # CORS
    cors_origins: str = Field(default="http://localhost:3000")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Ensure secret_key is provided and meets requirements."""
        if not v or len(v) < 32:
            raise ValueError(
                "SECRET_KEY must be set in environment and be at least 32 characters long"
            )
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def database_url(self) -> str:
        """Build async database URL."""
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "prod"

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"

    def auth_config(self) -> AuthConfig:
        """Build the explicit configuration handed to AuthService."""
        return AuthConfig(
            access_token_lifetime_seconds=self.access_token_expire_minutes * 60,
            refresh_token_lifetime_seconds=self.refresh_token_expire_days * 24 * 60 * 60,
            two_factor_challenge_ttl_seconds=self.two_factor_challenge_ttl_seconds,
            two_factor_setup_ttl_seconds=self.two_factor_setup_ttl_seconds,
            password_reset_ttl_seconds=self.password_reset_ttl_seconds,
            totp_issuer=self.totp_issuer,
            totp_valid_window=self.totp_valid_window,
            backup_code_count=self.backup_code_count,
            backup_code_ttl_seconds=self.backup_code_ttl_days * 24 * 60 * 60,
            side_effect_max_attempts=self.side_effect_max_attempts,
            side_effect_backoff_seconds=self.side_effect_backoff_seconds,
            password_policy=PasswordPolicy(
                min_length=self.password_min_length,
                require_uppercase=self.password_require_uppercase,
                require_lowercase=self.password_require_lowercase,
                require_digit=self.password_require_digit,
                require_special=self.password_require_special,
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the application lifecycle.
    For testing, clear the cache with: get_settings.cache_clear()

    Returns:
        Settings instance loaded from environment
    """
    return Settings()
