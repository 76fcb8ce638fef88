"""Application layer exceptions."""

from clockwork_auth.application.exceptions.exceptions import (
    AlreadyEnabledError,
    ApplicationError,
    ConflictError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    NoPendingSetupError,
    PrincipalNotFoundError,
    StorageFailureError,
    TokenExpiredError,
    TokenRevokedError,
    ValidationFailedError,
)

__all__ = [
    "ApplicationError",
    "ValidationFailedError",
    "ConflictError",
    "InvalidCredentialsError",
    "InvalidCodeError",
    "InvalidOrExpiredTokenError",
    "InvalidTokenError",
    "TokenExpiredError",
    "TokenRevokedError",
    "AlreadyEnabledError",
    "NoPendingSetupError",
    "PrincipalNotFoundError",
    "StorageFailureError",
]
