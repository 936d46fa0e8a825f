import asyncio
import logging
from abc import abstractmethod
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from functools import partial
from typing import Callable, Coroutine

#
# Project imports
#
from worldstatus.supervisor import BaseUnit
from worldstatus.utils import PrefixLoggerAdapter
from worldstatus.models import WorldStatus, ProbeSettings
from .ws_client import WebSocketTransport
from .rcon_client import RconSession, ProbeRejected
from .commands import CommandIssuer, Hypothesis, scoreboard_test_command
from .classifier import ResponseClassifier, classify_session
from .publisher import StatusPublisher
from .poller import StatusPoller

logger = logging.getLogger(__name__)

type RconSessionFactory = Callable[[], AbstractAsyncContextManager[RconSession]]

class StatusBridge(BaseUnit):
    """Runs a poller (and whatever else a variant needs) and keeps it running.

    A unit whose `run()` raises is logged and restarted after
    `RESTART_DELAY` seconds; nothing short of cancellation stops the bridge.
    """
    RESTART_DELAY = 5

    def __init__(self, name: str, publisher: StatusPublisher, interval: float, immediate: bool=True):
        super().__init__()
        self.name = name
        self.publisher = publisher
        self.poller = StatusPoller(name, interval, self.cycle, immediate)
        self.units: list[BaseUnit] = [self.poller]
        self.log = PrefixLoggerAdapter(logger, {"bridge": name})
        self.stack: AsyncExitStack
        self._tasks: set[asyncio.Task] = set()

    @abstractmethod
    async def cycle(self):
        pass

    async def _start(self):
        self.log.info("Entering")
        self.stack = AsyncExitStack()
        await self.stack.__aenter__()
        await self.stack.enter_async_context(self.publisher.sink)
        for unit in self.units:
            await self.stack.enter_async_context(unit)

    async def _stop(self, *args):
        self.log.info("Exiting")
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.stack.__aexit__(*args)
        del self.stack

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and (err := task.exception()) is not None:
            self.log.error("Background task failed: %s", err, exc_info=err)

    async def supervise(self, unit: BaseUnit):
        while True:
            try:
                await unit.run()
                self.log.warning("%s stopped running, restarting in %ss", unit, self.RESTART_DELAY)
            except Exception as err:
                self.log.exception("%s failed, restarting in %ss: %s", unit, self.RESTART_DELAY, err)
            await asyncio.sleep(self.RESTART_DELAY)

    async def run(self):
        async with asyncio.TaskGroup() as tg:
            for unit in self.units:
                tg.create_task(self.supervise(unit))

    def __repr__(self):
        return f"{type(self).__name__}('{self.name}')"

class WebSocketStatusBridge(StatusBridge):
    """Persistent variant: staggered `testfor` probes over a WebSocket,
    classified as their responses arrive, published only on change."""
    def __init__(
            self,
            transport: WebSocketTransport,
            issuer: CommandIssuer,
            classifier: ResponseClassifier,
            publisher: StatusPublisher,
            interval: float=60
        ):
        # The first cycle waits a full interval so the connection can come up
        super().__init__("websocket", publisher, interval, immediate=False)
        self.transport = transport
        self.issuer = issuer
        self.classifier = classifier
        self.transport.on_message(self.handle_message)
        self.units.insert(0, self.transport)

    async def cycle(self):
        await self.issuer.run_cycle()

    def handle_message(self, raw: str | bytes):
        status = self.classifier.classify(raw)
        if status is not None:
            self.spawn(self.publisher.publish(status))

class RconStatusBridge(StatusBridge):
    """Session variant: one RCON session per cycle, maintenance probe first,
    then open. The result is published every cycle."""
    def __init__(
            self,
            session_factory: RconSessionFactory,
            probe: ProbeSettings,
            publisher: StatusPublisher,
            interval: float=5
        ):
        super().__init__("rcon", publisher, interval)
        self.session_factory = session_factory
        self.probe_settings = probe

    async def test(self, session: RconSession, hypothesis: Hypothesis) -> bool:
        command = scoreboard_test_command(self.probe_settings.entity_name, self.probe_settings.score_name, hypothesis)
        try:
            await session.send(command)
        except ProbeRejected as err:
            self.log.debug("%s probe failed: %s", hypothesis.name, err.response)
            return False
        except Exception as err:
            self.log.warning("%s probe errored: %s", hypothesis.name, err)
            return False
        return True

    async def probe(self) -> WorldStatus:
        try:
            async with self.session_factory() as session:
                return await classify_session(partial(self.test, session))
        except Exception as err:
            self.log.error("RCON connection failed: %s", err)
            return WorldStatus.CLOSED

    async def cycle(self):
        status = await self.probe()
        await self.publisher.publish(status)
