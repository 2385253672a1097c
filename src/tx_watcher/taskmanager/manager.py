"""Periodic background job — runs one handler on a fixed period.

The watcher owns a single ``CronJob`` for its staleness sweep. A failing run
is logged and the loop carries on; ``stop()`` cancels the loop and waits for
it to exit.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class CronJob:
    """Run *handler* every *period* seconds on an asyncio task.

    Usage::

        job = CronJob("sweep", handler, period=300)
        await job.start()
        ...
        await job.stop()
    """

    def __init__(
        self,
        name: str,
        handler: Callable[[], Awaitable[None]],
        period: float,
    ) -> None:
        self.name = name
        self.period = period
        self._handler = handler
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None

    async def start(self) -> None:
        """Start the loop. No-op if already running."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run_loop(), name=f"cron-{self.name}")
        logger.info("Cron job %s started (every %.0fs)", self.name, self.period)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to exit."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Cron job %s stopped", self.name)

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self.period)
            try:
                await self._handler()
            except Exception:
                logger.exception("Cron job %s failed", self.name)
