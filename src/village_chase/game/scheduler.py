"""Frame scheduler driving the simulation one tick at a time.

Two ways to drive it:
    pump(): cooperative, called once per displayed frame by a render loop
    run(): fixed-interval asyncio timer for headless hosts

Either way exactly one tick runs per callback and nothing ticks once
stop() has been called, even a callback that was already scheduled.
"""

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class FrameScheduler:
    """Runs a tick function at a fixed visual cadence while started."""

    def __init__(self, tick_fn: Callable[[], None], fps: int = 60) -> None:
        self._tick_fn = tick_fn
        self._interval = 1.0 / max(1, fps)
        self._running = False
        self._generation = 0
        self._ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def interval(self) -> float:
        """Seconds between ticks when timer driven."""
        return self._interval

    @property
    def ticks(self) -> int:
        """Ticks executed since the last start()."""
        return self._ticks

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._generation += 1
        self._ticks = 0
        logger.debug(f"Scheduler started (generation {self._generation})")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._generation += 1
        logger.debug(f"Scheduler stopped after {self._ticks} ticks")

    def pump(self) -> bool:
        """Run one tick if started.

        Returns:
            True if a tick was executed
        """
        if not self._running:
            return False
        self._ticks += 1
        self._tick_fn()
        return True

    async def run(self) -> None:
        """Tick on a fixed-interval timer until stopped.

        Returns as soon as the scheduler is stopped, including when the
        stop happens from inside a tick.
        """
        if not self._running:
            self.start()
        generation = self._generation
        loop = asyncio.get_running_loop()
        next_time = loop.time()

        while self._running and self._generation == generation:
            self.pump()
            next_time += self._interval
            delay = next_time - loop.time()
            if delay < 0:
                # Fell behind, do not try to catch up with a burst of ticks
                next_time = loop.time()
                delay = 0
            await asyncio.sleep(delay)
