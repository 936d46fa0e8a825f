from __future__ import annotations

import asyncio

from worldstatus.core import ConnectionState, WebSocketTransport


class FakeConnection:
    def __init__(self, messages: list[str]):
        self.messages = messages
        self.sent: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def send(self, payload: str) -> None:
        self.sent.append(payload)

    async def close(self) -> None:
        pass

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self.messages:
            yield message


def test_send_is_dropped_while_disconnected() -> None:
    transport = WebSocketTransport("localhost", 19131)
    assert transport.state == ConnectionState.DISCONNECTED
    assert asyncio.run(transport.send("payload")) is False


def test_connection_dispatches_messages_then_disconnects() -> None:
    connection = FakeConnection(["one", "two"])
    received: list[str] = []
    states: list[ConnectionState] = []

    def connect(uri: str) -> FakeConnection:
        assert uri == "ws://localhost:19131"
        return connection

    transport = WebSocketTransport("localhost", 19131, connect=connect)

    def on_message(message: str) -> None:
        states.append(transport.state)
        received.append(message)

    transport.on_message(on_message)
    asyncio.run(transport.connect_once())

    assert received == ["one", "two"]
    assert states == [ConnectionState.CONNECTED, ConnectionState.CONNECTED]
    assert transport.state == ConnectionState.DISCONNECTED


def test_send_while_connected_reaches_connection() -> None:
    class HeldConnection(FakeConnection):
        def __init__(self):
            super().__init__([])
            self.release = asyncio.Event()

        async def _iterate(self):
            await self.release.wait()
            return
            yield

    async def _run() -> tuple[bool, HeldConnection]:
        connection = HeldConnection()
        transport = WebSocketTransport("localhost", 19131, connect=lambda uri: connection)
        task = asyncio.create_task(transport.connect_once())
        while transport.state != ConnectionState.CONNECTED:
            await asyncio.sleep(0)
        sent = await transport.send("ping")
        connection.release.set()
        await task
        return sent, connection

    sent, connection = asyncio.run(_run())
    assert sent is True
    assert connection.sent == ["ping"]


def test_connect_failure_uses_fallback_and_backs_off() -> None:
    fallbacks: list[BaseException] = []

    def connect(uri: str):
        raise ConnectionRefusedError("refused")

    transport = WebSocketTransport("localhost", 19131, reconnect_interval=30, max_reconnect_interval=100, connect=connect)
    transport.try_alternative_connection = fallbacks.append

    async def _run() -> list[float]:
        delays = []
        for _ in range(4):
            await transport.connect_once()
            delays.append(transport.next_delay())
        return delays

    assert asyncio.run(_run()) == [30, 60, 100, 100]
    assert len(fallbacks) == 4
    assert transport.state == ConnectionState.DISCONNECTED


def test_fixed_reconnect_interval_without_cap() -> None:
    def connect(uri: str):
        raise OSError("unreachable")

    transport = WebSocketTransport("localhost", 19131, connect=connect)
    asyncio.run(transport.connect_once())
    asyncio.run(transport.connect_once())
    assert transport.next_delay() == WebSocketTransport.RECONNECT_INTERVAL


def test_failing_message_handler_does_not_drop_connection() -> None:
    received: list[str] = []

    def on_message(message: str) -> None:
        received.append(message)
        raise ValueError("bad handler")

    transport = WebSocketTransport("localhost", 19131, connect=lambda uri: FakeConnection(["a", "b"]))
    transport.on_message(on_message)
    asyncio.run(transport.connect_once())
    assert received == ["a", "b"]
