import asyncio
import logging
from enum import IntEnum
from typing import Callable
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

#
# Project imports
#
from worldstatus.supervisor import BaseUnit
from worldstatus.utils import PrefixLoggerAdapter

logger = logging.getLogger(__name__)

type MessageCallback = Callable[[str | bytes], None]

class ConnectionState(IntEnum):
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2

class WebSocketTransport(BaseUnit):
    """Persistent connection to the game's WebSocket command interface.

    `run()` never returns on its own: whenever the connection closes or
    cannot be established it waits `reconnect_interval` seconds and tries
    again. With `max_reconnect_interval` set, consecutive failures double the
    wait up to that cap.

    Lifecycle:
        DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED -> ...
    """
    RECONNECT_INTERVAL = 30

    def __init__(
            self,
            host: str,
            port: int,
            reconnect_interval: float=RECONNECT_INTERVAL,
            max_reconnect_interval: float | None=None,
            connect=websockets.connect
        ):
        super().__init__()
        self.host = host
        self.port = port
        self.reconnect_interval = reconnect_interval
        self.max_reconnect_interval = max_reconnect_interval
        self._connect = connect
        self.log = PrefixLoggerAdapter(logger, {"transport": "websocket"})

        self._state: ConnectionState = ConnectionState.DISCONNECTED
        self._ws = None
        self._failures: int = 0
        self.message_cb: MessageCallback | None = None

    @property
    def uri(self) -> str:
        return f"ws://{self.host}:{self.port}"

    @property
    def state(self) -> ConnectionState:
        return self._state

    @state.setter
    def state(self, value: ConnectionState):
        if value != self._state:
            self.log.debug("Connection state %s -> %s", self._state.name, value.name)
            self._state = value

    @property
    def connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._ws is not None

    def on_message(self, cb: MessageCallback):
        self.message_cb = cb

    def next_delay(self) -> float:
        if self.max_reconnect_interval is None or self._failures == 0:
            return self.reconnect_interval
        return min(self.reconnect_interval * 2 ** (self._failures - 1), self.max_reconnect_interval)

    async def send(self, payload: str) -> bool:
        """Send a payload if connected. Returns whether it was handed to the
        connection; payloads are dropped while disconnected."""
        if not self.connected:
            self.log.debug("Not connected, dropping payload")
            return False
        try:
            await self._ws.send(payload)
        except ConnectionClosed as err:
            self.log.warning("Connection closed while sending: %s", err)
            return False
        return True

    def try_alternative_connection(self, err: BaseException):
        # No alternative route to the server exists yet, so only report it
        self.log.warning("No alternative connection available after error: %s", err)

    def dispatch(self, message: str | bytes):
        if self.message_cb is None:
            return
        try:
            self.message_cb(message)
        except Exception:
            self.log.exception("Message handler failed")

    async def connect_once(self):
        """Hold one connection open until it closes or fails"""
        self.state = ConnectionState.CONNECTING
        self.log.info("Connecting to %s", self.uri)
        try:
            async with self._connect(self.uri) as ws:
                self._ws = ws
                self._failures = 0
                self.state = ConnectionState.CONNECTED
                self.log.info("Connected to %s", self.uri)
                async for message in ws:
                    self.dispatch(message)
            self.log.info("Connection to %s closed", self.uri)
        except ConnectionClosed as err:
            self.log.warning("Connection to %s dropped: %s", self.uri, err)
        except (OSError, WebSocketException) as err:
            self._failures += 1
            self.log.error("Could not connect to %s: %s", self.uri, err)
            self.try_alternative_connection(err)
        finally:
            self._ws = None
            self.state = ConnectionState.DISCONNECTED

    async def _start(self):
        self._failures = 0

    async def _stop(self, *args):
        if self._ws is not None:
            await self._ws.close()

    async def run(self):
        while True:
            await self.connect_once()
            delay = self.next_delay()
            self.log.info("Reconnecting in %ss", delay)
            await asyncio.sleep(delay)

    def __repr__(self):
        return f"WebSocketTransport('{self.uri}')"
