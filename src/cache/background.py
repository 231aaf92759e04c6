# src/cache/background.py - v1
"""Detached background tasks for cache population.

Each spawned coroutine runs as its own asyncio task with a strong reference
held until it finishes. Its done-callback is the error boundary: exceptions
are logged and counted, never re-raised into the request that scheduled them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Registry of fire-and-forget tasks with a log-and-drop error boundary."""

    def __init__(self, on_error: Callable[[BaseException], None] | None = None) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._on_error = on_error

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        """Schedule ``coro`` without awaiting it."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Background task %s cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error(
            "Background task %s failed: %s", task.get_name(), exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        if self._on_error is not None:
            self._on_error(exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for every pending task; cancel stragglers after ``timeout``."""
        while self._tasks:
            tasks = list(self._tasks)
            done, not_done = await asyncio.wait(tasks, timeout=timeout)
            if not_done:
                logger.warning(
                    "Cancelling %d background task(s) still running after %.1fs",
                    len(not_done), timeout or 0.0,
                )
                for task in not_done:
                    task.cancel()
                await asyncio.gather(*not_done, return_exceptions=True)
                return
