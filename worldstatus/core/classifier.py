import logging
from typing import Awaitable, Callable
from pydantic import ValidationError

#
# Project imports
#
from worldstatus.models import WorldStatus, InboundMessage
from worldstatus.utils import PrefixLoggerAdapter
from .commands import Hypothesis, PendingRequests

logger = logging.getLogger(__name__)

type Probe = Callable[[Hypothesis], Awaitable[bool]]

NO_TARGETS = "No targets matched"
FOUND = "Found"

def classify_status_message(status_message: str) -> WorldStatus | None:
    """Map the status message of a `testfor` response to a world status.
    Returns None when the message says nothing about the status."""
    if FOUND in status_message:
        if "score=0" in status_message:
            return WorldStatus.OPEN
        if "score=1" in status_message:
            return WorldStatus.MAINTENANCE
    elif NO_TARGETS in status_message:
        return WorldStatus.CLOSED
    return None

async def classify_session(probe: Probe) -> WorldStatus:
    """Run the session probes in order: maintenance first, then open.
    Anything that fails both probes is closed."""
    if await probe(Hypothesis.MAINTENANCE):
        return WorldStatus.MAINTENANCE
    if await probe(Hypothesis.OPEN):
        return WorldStatus.OPEN
    return WorldStatus.CLOSED

class ResponseClassifier:
    def __init__(self, pending: PendingRequests, accept_unmatched: bool=False):
        self.pending = pending
        self.accept_unmatched = accept_unmatched
        self.log = PrefixLoggerAdapter(logger, {"classifier": "websocket"})

    def classify(self, raw: str | bytes) -> WorldStatus | None:
        try:
            message = InboundMessage.model_validate_json(raw)
        except ValidationError as err:
            self.log.warning("Could not parse message from server: %s", err)
            return None

        if not message.is_command_response:
            return None

        request_id = message.header.request_id
        hypothesis = self.pending.resolve(request_id)
        if hypothesis is None:
            if not self.accept_unmatched:
                self.log.debug("Ignoring response to unknown or expired request %s", request_id)
                return None
            self.log.debug("Classifying response to unknown or expired request %s", request_id)

        status_message = message.status_message
        if status_message is None:
            return None

        status = classify_status_message(status_message)
        self.log.debug("Response %r to %s probe classified as %s", status_message, hypothesis.name if hypothesis is not None else "unknown", status)
        return status
