"""Recompute clock - fire a callback now and then on a fixed interval."""

import asyncio
from typing import Callable, Optional

from src.utils.engine_config import EngineConfig
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


class RecomputeClock:
    """Drive periodic recomputation from the running event loop."""

    def __init__(
        self,
        callback: Callable[[], None],
        interval_seconds: float = EngineConfig.NOTIFICATION_TICK_SECONDS,
    ):
        self.callback = callback
        self.interval_seconds = interval_seconds
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """
        Fire once immediately, then every interval.

        Must be called from inside a running event loop. Starting a running
        clock does nothing.
        """
        if self.running:
            return
        self._fire()
        self._task = asyncio.create_task(self._run())
        logger.info("Recompute clock started", interval_seconds=self.interval_seconds)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self._fire()

    def _fire(self) -> None:
        self.ticks += 1
        try:
            self.callback()
        except Exception as e:
            logger.error(
                "Recompute tick failed",
                tick=self.ticks,
                error=str(e),
                exc_info=True
            )

    def stop(self) -> None:
        """Cancel the timer; no tick runs after this returns."""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info("Recompute clock stopped", ticks=self.ticks)
