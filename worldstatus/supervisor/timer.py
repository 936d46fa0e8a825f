import time
import asyncio
import logging
from contextlib import suppress

#
# Project imports
#
from .base_unit import BaseUnit

logger = logging.getLogger(__name__)

class Timer(BaseUnit):
    """Countdown that can be rearmed, shortened or disabled while waiting.

    `run()` returns once `remaining` reaches zero. Changing `interval` or
    `remaining` wakes the waiter up so the new deadline is honoured right
    away. An interval of `None` disables the timer until a new interval or
    remaining time is set.
    """
    def __init__(self, interval: float | None):
        super().__init__()
        self._interval: float | None = interval
        self._deadline: float | None = None
        self._changed = asyncio.Event()

    @property
    def interval(self) -> float | None:
        return self._interval

    @interval.setter
    def interval(self, value: float | None):
        self._interval = value
        self._deadline = None if value is None else time.perf_counter() + value
        self._changed.set()

    @property
    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(self._deadline - time.perf_counter(), 0)

    @remaining.setter
    def remaining(self, value: float):
        self._deadline = time.perf_counter() + value
        self._changed.set()

    def reset(self):
        """Rearm the timer for a full interval starting now"""
        if self.interval is None:
            self._deadline = None
        else:
            self.remaining = self.interval

    def fire_now(self):
        logger.debug("Timer fire requested immediately, setting remaining time to 0")
        self.remaining = 0

    async def _start(self):
        self.reset()

    async def _stop(self, *args):
        self._deadline = None

    async def run(self):
        while (remaining := self.remaining) is None or remaining > 0:
            logger.debug("Time remaining is %ss", remaining)
            self._changed.clear()
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._changed.wait(), remaining)
        logger.debug("Timer done")

    def __repr__(self):
        return f"Timer({self.interval})"
