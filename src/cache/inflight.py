# src/cache/inflight.py - v2
"""Per-key in-flight request coalescing (single-flight).

The first caller for a key starts the computation as its own task; every
caller for that key, the first included, awaits the task through
``asyncio.shield``. Cancelling one caller therefore never cancels the shared
computation or the other waiters. The entry is removed as soon as the task
finishes, so a later call always starts fresh.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")


class InflightRequests(Generic[T]):
    """Map of key -> task for computations currently running."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[T]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    async def run(
        self, key: str, fn: Callable[[], Awaitable[T]]
    ) -> tuple[T, bool]:
        """Run ``fn`` once per concurrent burst of calls for ``key``.

        Returns:
            (result, leader) where ``leader`` is True for the caller that
            started ``fn``.
        """
        task = self._tasks.get(key)
        leader = task is None
        if task is None:
            task = asyncio.get_running_loop().create_task(
                _call(fn), name=f"inflight:{key}"
            )
            self._tasks[key] = task
            # Registered before any waiter, so the entry is gone by the
            # time the first caller resumes.
            task.add_done_callback(lambda t: self._finished(key, t))
        return await asyncio.shield(task), leader

    def _finished(self, key: str, task: asyncio.Task[T]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        # Every waiter may have been cancelled; mark the error retrieved.
        if not task.cancelled():
            task.exception()


async def _call(fn: Callable[[], Awaitable[T]]) -> T:
    return await fn()
