"""Authentication DTOs for the application layer.

Email and password fields are plain strings on purpose: their format and
strength rules are enforced by the service so that every failing rule is
reported together, before anything is written.
"""

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from clockwork_auth.application.dtos.principal_dto import PrincipalDTO


def strip_whitespace(v: str | None) -> str | None:
    """Strip whitespace from string values."""
    return v.strip() if isinstance(v, str) else v


class SignupDTO(BaseModel):
    """
    DTO for account registration.

    Validation:
    - name: Cannot be empty, whitespace is automatically trimmed
    - roles: Defaults to ["client"] when omitted; may not be empty
    """

    email: str
    password: str
    name: Annotated[str, BeforeValidator(strip_whitespace), Field(min_length=1)]
    phone: Annotated[str, BeforeValidator(strip_whitespace)] | None = None
    roles: Optional[list[str]] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "Str0ng!Pass",
                "name": "Alex Doe",
                "roles": ["client"],
            }
        }
    )


class LoginDTO(BaseModel):
    """DTO for user login request."""

    email: str = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "user@example.com",
                    "password": "Str0ng!Pass"
                }
            ]
        }
    }


class TokenPairDTO(BaseModel):
    """DTO for token response."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                    "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                    "token_type": "bearer",
                    "expires_in": 900
                }
            ]
        }
    }


class AuthenticatedDTO(BaseModel):
    """Principal profile plus a fresh token pair."""

    principal: PrincipalDTO
    tokens: TokenPairDTO


class LoginResultDTO(BaseModel):
    """
    Outcome of a password login.

    Either `authenticated` (tokens and principal set) or
    `two_factor_pending` (only `challenge_token` set; redeem it with a
    TOTP or backup code through verify_two_factor).
    """

    status: Literal["authenticated", "two_factor_pending"]
    tokens: Optional[TokenPairDTO] = None
    principal: Optional[PrincipalDTO] = None
    challenge_token: Optional[str] = None


class VerifyTwoFactorDTO(BaseModel):
    """DTO for redeeming a login challenge."""

    challenge_token: str = Field(..., description="Token returned by a two_factor_pending login")
    code: Annotated[str, BeforeValidator(strip_whitespace), Field(min_length=1)]


class RefreshTokenDTO(BaseModel):
    """DTO for refresh token request."""

    refresh_token: str = Field(..., description="JWT refresh token")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."
                }
            ]
        }
    }


class PasswordResetRequestDTO(BaseModel):
    email: str


class PasswordResetConfirmDTO(BaseModel):
    token: str
    new_password: str


class AcknowledgementDTO(BaseModel):
    """Plain confirmation message."""

    message: str


class TwoFactorSetupDTO(BaseModel):
    """Pending enrollment: the secret and the URI to render as a QR code."""

    secret: str
    provisioning_uri: str


class ConfirmTwoFactorDTO(BaseModel):
    code: Annotated[str, BeforeValidator(strip_whitespace), Field(min_length=1)]


class BackupCodesDTO(BaseModel):
    """Plaintext backup codes, shown exactly once at enrollment."""

    backup_codes: list[str]


class DisableTwoFactorDTO(BaseModel):
    password: str = Field(..., min_length=1)
