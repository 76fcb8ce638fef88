"""Data Transfer Objects for application layer."""

from clockwork_auth.application.dtos.auth_dto import (
    AcknowledgementDTO,
    AuthenticatedDTO,
    BackupCodesDTO,
    ConfirmTwoFactorDTO,
    DisableTwoFactorDTO,
    LoginDTO,
    LoginResultDTO,
    PasswordResetConfirmDTO,
    PasswordResetRequestDTO,
    RefreshTokenDTO,
    SignupDTO,
    TokenPairDTO,
    TwoFactorSetupDTO,
    VerifyTwoFactorDTO,
)
from clockwork_auth.application.dtos.principal_dto import PrincipalDTO

__all__ = [
    "AcknowledgementDTO",
    "AuthenticatedDTO",
    "BackupCodesDTO",
    "ConfirmTwoFactorDTO",
    "DisableTwoFactorDTO",
    "LoginDTO",
    "LoginResultDTO",
    "PasswordResetConfirmDTO",
    "PasswordResetRequestDTO",
    "PrincipalDTO",
    "RefreshTokenDTO",
    "SignupDTO",
    "TokenPairDTO",
    "TwoFactorSetupDTO",
    "VerifyTwoFactorDTO",
]
