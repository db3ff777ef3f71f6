"""Detached task supervisor — fire-and-forget work that must not fail the request."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTaskSupervisor:
    """Owns detached asyncio tasks (cache writes, popularity tracking).

    Keeps a strong reference to every running task so the event loop cannot
    garbage-collect it mid-flight, logs failures instead of raising them, and
    gives pending work a bounded grace period on shutdown.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._accepting = True

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task | None:
        """Schedule ``coro`` without awaiting it. Returns the task, or ``None`` after shutdown."""
        if not self._accepting:
            logger.warning("Supervisor is shut down — dropping detached task %s", name)
            coro.close()
            return None
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Detached task %s was cancelled", task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Detached task %s failed: %s",
                task.get_name(),
                error,
                exc_info=(type(error), error, error.__traceback__),
            )

    async def shutdown(self, grace_seconds: float = 10.0) -> None:
        """Stop accepting work, wait up to ``grace_seconds``, then cancel the rest."""
        self._accepting = False
        if not self._tasks:
            return

        pending = set(self._tasks)
        logger.info("Waiting up to %.1fs for %d detached tasks", grace_seconds, len(pending))
        _, still_running = await asyncio.wait(pending, timeout=grace_seconds)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning("Cancelled %d detached tasks after grace period", len(still_running))
