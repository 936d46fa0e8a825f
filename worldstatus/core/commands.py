import uuid
import asyncio
import logging
from enum import IntEnum
from typing import Protocol

#
# Project imports
#
from worldstatus.models import CommandRequest, ProbeSettings
from worldstatus.utils import PrefixLoggerAdapter

logger = logging.getLogger(__name__)

class Hypothesis(IntEnum):
    """Score value a probe tests for"""
    OPEN = 0
    MAINTENANCE = 1

def testfor_command(entity_name: str, score_name: str, hypothesis: Hypothesis) -> str:
    return f"testfor @e[name={entity_name},scores={{{score_name}={int(hypothesis)}}}]"

def scoreboard_test_command(entity_name: str, score_name: str, hypothesis: Hypothesis) -> str:
    return f"scoreboard players test {entity_name} {score_name} {int(hypothesis)}"

class CommandTransport(Protocol):
    async def send(self, payload: str) -> bool:
        ...

class PendingRequests:
    """Correlation ids issued during the current poll cycle.

    Cleared at the start of every cycle, so a response can only be matched to
    a probe from the cycle that is currently running.
    """
    def __init__(self):
        self._pending: dict[str, Hypothesis] = {}
        self.cycle: int = 0

    def __len__(self):
        return len(self._pending)

    def __contains__(self, request_id: str):
        return request_id in self._pending

    def new_cycle(self):
        if self._pending:
            logger.debug("Discarding %s unanswered request(s) from cycle %s", len(self._pending), self.cycle)
        self._pending.clear()
        self.cycle += 1

    def register(self, hypothesis: Hypothesis) -> str:
        request_id = str(uuid.uuid4())
        self._pending[request_id] = hypothesis
        return request_id

    def resolve(self, request_id: str | None) -> Hypothesis | None:
        if request_id is None:
            return None
        return self._pending.pop(request_id, None)

    def discard(self, request_id: str):
        self._pending.pop(request_id, None)

class CommandIssuer:
    STAGGER = 1

    def __init__(
            self,
            transport: CommandTransport,
            probe: ProbeSettings,
            pending: PendingRequests,
            stagger: float=STAGGER
        ):
        self.transport = transport
        self.probe = probe
        self.pending = pending
        self.stagger = stagger
        self.log = PrefixLoggerAdapter(logger, {"issuer": "websocket"})

    async def issue(self, hypothesis: Hypothesis) -> str | None:
        """Send one `testfor` probe. Returns its correlation id, or None if
        the transport dropped it."""
        command = testfor_command(self.probe.entity_name, self.probe.score_name, hypothesis)
        request_id = self.pending.register(hypothesis)
        request = CommandRequest.create(command, request_id)
        if await self.transport.send(request.to_wire()):
            self.log.debug("Sent %r as %s", command, request_id)
            return request_id
        self.pending.discard(request_id)
        return None

    async def run_cycle(self):
        # Probes are staggered so their responses do not interleave
        self.pending.new_cycle()
        await self.issue(Hypothesis.OPEN)
        await asyncio.sleep(self.stagger)
        await self.issue(Hypothesis.MAINTENANCE)
