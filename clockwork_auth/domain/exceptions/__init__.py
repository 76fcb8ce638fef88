"""Domain exceptions - business rule violations."""

from clockwork_auth.domain.exceptions.domain_exceptions import (
    BusinessRuleViolationException,
    DomainException,
    EmailAlreadyRegisteredException,
    ExpiredTokenException,
    InvalidEntityStateException,
    MalformedTokenException,
    SessionStoreUnavailableException,
)

__all__ = [
    "DomainException",
    "InvalidEntityStateException",
    "BusinessRuleViolationException",
    "MalformedTokenException",
    "ExpiredTokenException",
    "SessionStoreUnavailableException",
    "EmailAlreadyRegisteredException",
]
