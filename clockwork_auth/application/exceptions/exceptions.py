"""Application layer exceptions.

Messages are deliberately generic: callers must not be able to tell an
unknown email from a wrong password, a wrong 2FA code from an expired
challenge, or an expired refresh token from a superseded one. The
specifics go to the logs and the audit trail.
"""


class ApplicationError(Exception):
    """Base application layer exception."""

    def __init__(self, message: str, error_code: str = "APPLICATION_ERROR"):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ValidationFailedError(ApplicationError):
    """Raised when input is malformed; always raised before any mutation."""

    def __init__(self, message: str = "Validation failed", details: list[str] | None = None):
        super().__init__(message, error_code="VALIDATION_FAILED")
        self.details = details or []


class ConflictError(ApplicationError):
    """Raised when signing up with an email that is already registered."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message, error_code="EMAIL_ALREADY_EXISTS")


class InvalidCredentialsError(ApplicationError):
    """Raised when login credentials are invalid."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, error_code="INVALID_CREDENTIALS")


class InvalidCodeError(ApplicationError):
    """Raised for any second-factor failure (bad code, expired or superseded challenge)."""

    def __init__(self, message: str = "Invalid verification code"):
        super().__init__(message, error_code="INVALID_CODE")


class InvalidOrExpiredTokenError(ApplicationError):
    """Raised for refresh and password-reset token failures of any kind."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, error_code="INVALID_OR_EXPIRED_TOKEN")


class InvalidTokenError(ApplicationError):
    """Raised when an access token is invalid or malformed."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, error_code="INVALID_TOKEN")


class TokenExpiredError(ApplicationError):
    """Raised when an access token has expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, error_code="TOKEN_EXPIRED")


class TokenRevokedError(ApplicationError):
    """Raised when an access token was explicitly revoked (logout)."""

    def __init__(self, message: str = "Token has been revoked"):
        super().__init__(message, error_code="TOKEN_REVOKED")


class AlreadyEnabledError(ApplicationError):
    """Raised when enabling 2FA for a principal that already has it."""

    def __init__(self, message: str = "Two-factor authentication is already enabled"):
        super().__init__(message, error_code="TWO_FACTOR_ALREADY_ENABLED")


class NoPendingSetupError(ApplicationError):
    """Raised when confirming 2FA setup without a live pending enrollment."""

    def __init__(self, message: str = "No pending two-factor setup found. Please start again."):
        super().__init__(message, error_code="NO_PENDING_TWO_FACTOR_SETUP")


class PrincipalNotFoundError(ApplicationError):
    """Raised when an authenticated subject no longer exists."""

    def __init__(self, message: str = "Account not found"):
        super().__init__(message, error_code="PRINCIPAL_NOT_FOUND")


class StorageFailureError(ApplicationError):
    """Raised when the credential or session store fails."""

    def __init__(self, message: str = "Authentication temporarily unavailable"):
        super().__init__(message, error_code="STORAGE_FAILURE")
