"""Audit sink interface and the request context carried into audit records."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum


class AuditAction(StrEnum):
    """Audit event types."""

    SIGNUP = "signup"
    LOGIN = "login"
    FAILED_LOGIN = "failed_login"
    TWO_FACTOR_SUCCESS = "2fa_success"
    FAILED_TWO_FACTOR = "failed_2fa"
    LOGOUT = "logout"
    PASSWORD_RESET_REQUEST = "password_reset_request"
    PASSWORD_RESET = "password_reset"
    TWO_FACTOR_ENABLED = "2fa_enabled"
    TWO_FACTOR_DISABLED = "2fa_disabled"


@dataclass(frozen=True)
class RequestContext:
    """Caller metadata recorded alongside audit events."""

    ip_address: str | None = None
    user_agent: str | None = None


class IAuditSink(ABC):
    """
    Best-effort audit trail.

    Records are written fire-and-forget; the full detail of security
    failures (which the caller only sees as generic errors) lives here.
    """

    @abstractmethod
    async def record(
        self,
        subject_id: int | None,
        action: AuditAction,
        resource: str,
        details: str,
        context: RequestContext | None = None,
    ) -> None:
        """
        Append one audit event.

        Args:
            subject_id: Principal concerned, if known
            action: Event type
            resource: Resource kind ("user" or "session")
            details: Human-readable description
            context: Caller IP / user agent
        """
        pass
