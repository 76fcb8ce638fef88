"""Notification dispatcher that writes to the application log.

Stands in for the mail/SMS service in development and in deployments
where delivery is handled by a log-shipping pipeline. Reset tokens are
never logged in full.
"""

import logging

from clockwork_auth.domain.services.notification_dispatcher import INotificationDispatcher

logger = logging.getLogger(__name__)


def _mask_email(email: str) -> str:
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"


class LoggingNotificationDispatcher(INotificationDispatcher):
    """INotificationDispatcher that only logs what would be sent."""

    async def send_welcome(self, email: str, name: str) -> None:
        logger.info(f"Welcome notification for {_mask_email(email)}")

    async def send_password_reset(self, email: str, name: str, token: str) -> None:
        logger.info(
            f"Password reset notification for {_mask_email(email)} (token ...{token[-6:]})"
        )

    async def send_password_changed(self, email: str, name: str) -> None:
        logger.info(f"Password changed notification for {_mask_email(email)}")
