"""Fire-and-forget dispatch for notifications and audit records.

The authentication operation that triggers a side effect has already
committed by the time the side effect runs; a failing mail relay or audit
backend must never turn a successful login into an error. Each effect runs
in its own task, is retried with exponential backoff, and is logged and
dropped once its attempts are exhausted.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class SideEffectDispatcher:
    """
    Run coroutines in the background with bounded retries.

    Args:
        max_attempts: Total attempts per effect (first try included)
        backoff_seconds: Delay before the second attempt; doubles after each failure
    """

    def __init__(self, max_attempts: int = 3, backoff_seconds: float = 0.5):
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = backoff_seconds
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, name: str, effect: Callable[[], Awaitable[None]]) -> asyncio.Task:
        """
        Schedule `effect` and return immediately.

        `effect` is a factory so that every retry awaits a fresh coroutine.

        Example:
            dispatcher.dispatch("welcome", lambda: notifier.send_welcome(email, name))
        """
        task = asyncio.create_task(self._run(name, effect), name=f"side-effect:{name}")
        # The event loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, name: str, effect: Callable[[], Awaitable[None]]) -> None:
        attempt = 0
        while attempt < self._max_attempts:
            try:
                await effect()
                if attempt > 0:
                    logger.info(f"Side effect '{name}' succeeded after {attempt + 1} attempts")
                return
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                attempt += 1
                logger.warning(
                    f"Side effect '{name}' failed (attempt {attempt}/{self._max_attempts}): {exc}"
                )
                if attempt < self._max_attempts:
                    await asyncio.sleep(self._backoff_seconds * (2 ** (attempt - 1)))

        logger.error(f"Side effect '{name}' dropped after {self._max_attempts} attempts")

    async def drain(self, timeout: float | None = None) -> None:
        """
        Wait for every in-flight effect (used at shutdown and in tests).

        Effects still running after `timeout` seconds are cancelled.
        """
        if not self._tasks:
            return
        tasks = list(self._tasks)
        _, still_running = await asyncio.wait(tasks, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(f"Cancelled {len(still_running)} side effects still running at shutdown")
            await asyncio.gather(*still_running, return_exceptions=True)
