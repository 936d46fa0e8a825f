import asyncio
import logging
from typing import Awaitable, Callable

#
# Project imports
#
from worldstatus.supervisor import Timer
from worldstatus.utils import PrefixLoggerAdapter

logger = logging.getLogger(__name__)

type Cycle = Callable[[], Awaitable[None]]

class StatusPoller(Timer):
    """Starts a probe cycle every `interval` seconds.

    The timer is rearmed as soon as it fires, before the cycle runs, so the
    period does not drift with cycle duration. Cycles are not awaited:
    a slow cycle overlaps with the next one instead of delaying it.
    """
    def __init__(self, name: str, interval: float, cycle: Cycle, immediate: bool=True):
        super().__init__(interval)
        self.name = name
        self.cycle = cycle
        self.immediate = immediate
        self.cycles_started: int = 0
        self.log = PrefixLoggerAdapter(logger, {"poller": name})
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def _start(self):
        await super()._start()
        if self.immediate:
            self.fire_now()

    async def _stop(self, *args):
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await super()._stop(*args)

    def _cycle_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        if (err := task.exception()) is not None:
            self.log.error("Probe cycle failed: %s", err, exc_info=err)

    def start_cycle(self) -> asyncio.Task:
        self.cycles_started += 1
        if self._tasks:
            self.log.debug("Starting cycle %s with %s cycle(s) still in flight", self.cycles_started, len(self._tasks))
        task = asyncio.create_task(self.cycle())
        self._tasks.add(task)
        task.add_done_callback(self._cycle_done)
        return task

    async def run(self):
        while True:
            self.log.debug("Next cycle in %ss", self.remaining)
            await super().run()
            self.reset()
            self.start_cycle()

    def __repr__(self):
        return f"StatusPoller('{self.name}', {self.interval})"
