"""Periodic tick driver - calls ``OfficeSimulator.update`` from a background task."""

import asyncio
import logging

from simulation.engine import OfficeSimulator

logger = logging.getLogger(__name__)


class TickDriver:
    """Best-effort periodic driver: one ``update`` per interval, never two at once."""

    def __init__(self, engine: OfficeSimulator, interval_s: float = 1.0, delta_minutes: float = 1.0) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval must be positive, got {interval_s}")
        self.engine = engine
        self.interval_s = interval_s
        self.delta_minutes = delta_minutes
        self.ticks_run: int = 0
        self.failures: int = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the periodic task on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="office-sim-ticks")
        logger.info("Tick driver started (%.2fs interval, %.1f min/tick)", self.interval_s, self.delta_minutes)

    async def stop(self) -> None:
        """Cancel the periodic task and wait for it to exit."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Tick driver stopped after %d ticks", self.ticks_run)

    def tick_once(self) -> None:
        try:
            self.engine.update(self.delta_minutes)
        except Exception:
            self.failures += 1
            logger.exception("Tick failed")
        finally:
            self.ticks_run += 1

    async def _run(self) -> None:
        while True:
            self.tick_once()
            await asyncio.sleep(self.interval_s)
