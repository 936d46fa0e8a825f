import time
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

#
# Project imports
#
from worldstatus.models import WorldStatus, StatusRecord
from worldstatus.utils import PrefixLoggerAdapter
from .sinks import StatusSink

logger = logging.getLogger(__name__)

def epoch_millis() -> int:
    return time.time_ns() // 1_000_000

@dataclass
class StatusState:
    """Last known world status, shared for the lifetime of the process.
    Only the publisher writes to it."""
    current: WorldStatus | None = None
    last_epoch_millis: int = 0

class StatusPublisher:
    """Pushes status changes to a sink.

    The in-memory status is authoritative: it is updated before the sink is
    written and is not rolled back when the write fails, so a failed write
    is only repaired by the next change. With `always_write` every publish
    is written, changed or not.
    """
    def __init__(
            self,
            state: StatusState,
            sink: StatusSink,
            always_write: bool=False,
            clock: Callable[[], int]=epoch_millis
        ):
        self.state = state
        self.sink = sink
        self.always_write = always_write
        self.clock = clock
        self.log = PrefixLoggerAdapter(logger, {"publisher": repr(sink)})
        self._lock = asyncio.Lock()  # serialize sink writes

    @property
    def current(self) -> WorldStatus | None:
        return self.state.current

    def build_record(self, status: WorldStatus) -> StatusRecord:
        # Timestamps never repeat or go backwards, even if the clock does
        millis = max(self.clock(), self.state.last_epoch_millis + 1)
        self.state.last_epoch_millis = millis
        return StatusRecord.create(status, millis)

    async def publish(self, status: WorldStatus) -> StatusRecord | None:
        """Returns the record written, or None if nothing was written"""
        if status == self.state.current and not self.always_write:
            self.log.debug("Status is still %s", status)
            return None

        previous = self.state.current
        self.state.current = status
        record = self.build_record(status)
        if previous != status:
            self.log.info("World status changed %s -> %s", previous, status)

        async with self._lock:
            try:
                await self.sink.write(record)
            except Exception as err:
                self.log.exception("Could not write status %s: %s", status, err)
                return None
        self.log.info("Published %s - %s", status, record.human_message)
        return record
