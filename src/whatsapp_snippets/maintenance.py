"""
Periodic background jobs.

The message store flush runs on a fixed interval for as long as a session is
alive. This module owns the loop/cancel mechanics so callers only supply the
coroutine to run and the interval.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


async def startup(
    task_fn: Callable[[], Awaitable[object]], interval: float, *, name: str = "periodic job"
) -> asyncio.Task:
    """
    Schedule ``task_fn`` to run every ``interval`` seconds.

    The first run happens one interval after scheduling. Exceptions raised by
    ``task_fn`` are logged and the loop keeps going; only cancellation ends it.

    Returns the created :class:`asyncio.Task` handle.
    """

    async def _periodic() -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await task_fn()
            except Exception:
                logger.exception("%s failed", name)

    return asyncio.create_task(_periodic(), name=name)


async def shutdown(task: asyncio.Task | None) -> None:
    """
    Cancel a task started with :func:`startup` and wait for it to finish.

    Tolerates ``None`` and tasks that already completed.
    """

    if not task or task.done():
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
