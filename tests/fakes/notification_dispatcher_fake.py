"""Fake notification dispatcher recording what would have been sent."""

from clockwork_auth.domain.services.notification_dispatcher import INotificationDispatcher


class FakeNotificationDispatcher(INotificationDispatcher):
    """
    Records every notification as a (kind, email, extra) tuple.

    Set `failures_before_success` to make the next N sends raise.
    """

    def __init__(self, failures_before_success: int = 0):
        self.sent: list[tuple[str, str, str | None]] = []
        self.attempts = 0
        self.failures_before_success = failures_before_success

    async def _send(self, kind: str, email: str, extra: str | None = None) -> None:
        self.attempts += 1
        if self.failures_before_success > 0:
            self.failures_before_success -= 1
            raise ConnectionError("SMTP relay unavailable")
        self.sent.append((kind, email, extra))

    async def send_welcome(self, email: str, name: str) -> None:
        await self._send("welcome", email)

    async def send_password_reset(self, email: str, name: str, token: str) -> None:
        await self._send("password_reset", email, token)

    async def send_password_changed(self, email: str, name: str) -> None:
        await self._send("password_changed", email)

    def kinds(self) -> list[str]:
        return [kind for kind, _, _ in self.sent]

    def last_reset_token(self) -> str | None:
        for kind, _, extra in reversed(self.sent):
            if kind == "password_reset":
                return extra
        return None
