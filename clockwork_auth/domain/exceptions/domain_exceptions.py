"""Domain layer exceptions for business rule violations."""


class DomainException(Exception):
    """
    Base exception for domain layer.

    Domain exceptions represent business rule violations and should be
    raised when domain invariants are broken.
    """

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR"):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class InvalidEntityStateException(DomainException):
    """Raised when an entity is in an invalid state."""

    def __init__(self, message: str):
        super().__init__(message, error_code="INVALID_ENTITY_STATE")


class BusinessRuleViolationException(DomainException):
    """Raised when a business rule is violated."""

    def __init__(self, message: str):
        super().__init__(message, error_code="BUSINESS_RULE_VIOLATION")


class MalformedTokenException(DomainException):
    """Raised by token signers when a token fails signature, shape or type checks."""

    def __init__(self, message: str = "Token is malformed"):
        super().__init__(message, error_code="MALFORMED_TOKEN")


class ExpiredTokenException(MalformedTokenException):
    """Raised by token signers when a correctly signed token is past its expiry."""

    def __init__(self, message: str = "Token has expired"):
        DomainException.__init__(self, message, error_code="EXPIRED_TOKEN")


class SessionStoreUnavailableException(DomainException):
    """Raised by session store implementations when the backend cannot be reached."""

    def __init__(self, message: str = "Session store unavailable"):
        super().__init__(message, error_code="SESSION_STORE_UNAVAILABLE")


class EmailAlreadyRegisteredException(DomainException):
    """Raised by credential stores when an insert hits the unique email constraint."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message, error_code="EMAIL_ALREADY_EXISTS")
