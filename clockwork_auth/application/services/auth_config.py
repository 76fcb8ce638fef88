"""Explicit configuration consumed by the authentication services.

Built once from `Settings.auth_config()` at the composition root and
passed to the services at construction. The application layer never
reads environment variables itself.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PasswordPolicy:
    """Password strength rules applied at signup and password reset."""

    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_special: bool = True


@dataclass(frozen=True)
class AuthConfig:
    """Lifetimes, TOTP parameters and side-effect retry policy."""

    access_token_lifetime_seconds: int = 15 * 60
    refresh_token_lifetime_seconds: int = 7 * 24 * 60 * 60
    two_factor_challenge_ttl_seconds: int = 300
    two_factor_setup_ttl_seconds: int = 600
    password_reset_ttl_seconds: int = 3600
    totp_issuer: str = "ClockWork Platform"
    totp_valid_window: int = 2
    backup_code_count: int = 8
    backup_code_length: int = 8
    backup_code_ttl_seconds: int = 365 * 24 * 60 * 60
    default_roles: tuple[str, ...] = ("client",)
    side_effect_max_attempts: int = 3
    side_effect_backoff_seconds: float = 0.5
    password_policy: PasswordPolicy = field(default_factory=PasswordPolicy)
