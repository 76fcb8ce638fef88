"""Notification dispatcher interface.

Message content and transport (email, SMS) are owned elsewhere; the
authentication flows only say which notification a principal should get.
Calls are made fire-and-forget: a failure here never fails the
authentication operation that triggered it.
"""

from abc import ABC, abstractmethod


class INotificationDispatcher(ABC):
    """Outbound account notifications."""

    @abstractmethod
    async def send_welcome(self, email: str, name: str) -> None:
        """Greet a newly registered principal."""
        pass

    @abstractmethod
    async def send_password_reset(self, email: str, name: str, token: str) -> None:
        """Deliver a password-reset token (the link is built by the transport)."""
        pass

    @abstractmethod
    async def send_password_changed(self, email: str, name: str) -> None:
        """Tell a principal their password was just changed."""
        pass
