from typing import Self
from contextlib import AbstractAsyncContextManager
from abc import ABC, abstractmethod

class BaseUnit(AbstractAsyncContextManager, ABC):
    """A long lived piece of the bridge (transport, poller, ...).

    Units are entered once with `async with` (or `start()`), after which
    `run()` is awaited for the lifetime of the process. Entering and exiting
    are idempotent so a unit can be shared between owners.
    """
    def __init__(self):
        self._started: bool = False

    @property
    def started(self):
        return self._started

    async def start(self):
        if not self._started:
            self._started = True
            await self._start()

    async def stop(self):
        if self._started:
            self._started = False
            await self._stop(None, None, None)

    @abstractmethod
    async def _start(self):
        pass

    @abstractmethod
    async def _stop(self, *args):
        pass

    @abstractmethod
    async def run(self):
        pass

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, *args):
        if self._started:
            self._started = False
            await self._stop(*args)
        return False
