"""
Garbage Collection Module

The Reaper is a background asyncio task that sweeps expired Records out of
a CacheStore on a fixed interval for the lifetime of the process.
"""

import asyncio
from typing import Optional

import structlog

from ..config.settings import settings
from .store import CacheStore

logger = structlog.get_logger(__name__)


class Reaper:
    """
    Periodic garbage collector for a CacheStore.

    The Reaper reacts only to its timer, never to store size. A failing
    sweep is logged and the loop carries on with the next tick; only
    cancellation (stop() or process shutdown) ends it.

    Usage:
        reaper = Reaper(store, interval=60)
        reaper.start()
        ...
        await reaper.stop()

    Attributes:
        store: The CacheStore to sweep
        interval: Seconds between sweeps
        sweeps: Number of completed sweeps
        failures: Number of sweeps that raised
    """

    def __init__(self, store: CacheStore, interval: float = None):
        self.store = store
        self.interval = interval if interval is not None else settings.GC_INTERVAL
        if self.interval <= 0:
            raise ValueError("interval must be positive")

        self.sweeps = 0
        self.failures = 0
        self._task: Optional[asyncio.Task] = None

    def run_once(self) -> Optional[int]:
        """
        Perform a single guarded sweep.

        Returns:
            Number of Records removed, or None if the sweep failed
        """
        logger.info("Running garbage collection for cache")
        try:
            removed = self.store.sweep()
            self.sweeps += 1
            logger.debug("Garbage collection finished", removed=removed, remaining=self.store.size())
        except Exception:
            self.failures += 1
            logger.exception("Garbage collection failed")
            return None
        return removed

    async def run(self) -> None:
        """Sweep the store every interval until cancelled."""
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.run_once()
            except Exception:
                logger.exception("Garbage collection tick failed")

    def start(self) -> asyncio.Task:
        """Spawn the loop as a task on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
            logger.debug("Reaper started", interval=self.interval)
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
            logger.debug("Reaper stopped")

    def is_running(self) -> bool:
        """Check if the loop is currently scheduled."""
        return self._task is not None and not self._task.done()
