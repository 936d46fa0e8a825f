from __future__ import annotations

import asyncio

import pytest

from worldstatus.core import ProbeRejected, RconAuthError, RconSession


class FakeRconClient:
    instances: list["FakeRconClient"] = []

    def __init__(self, host: str, port: int, password: str = "secret", responses: dict[str, str] | None = None):
        self.host = host
        self.port = port
        self.password = password
        self.responses = responses or {}
        self.closed = False
        FakeRconClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        self.closed = True
        return False

    async def login(self, password: str) -> bool:
        return password == self.password

    async def command(self, command: str) -> str:
        return self.responses.get(command, "Unknown command")


def _factory(**kwargs):
    def factory(host: str, port: int) -> FakeRconClient:
        return FakeRconClient(host, port, **kwargs)

    return factory


def test_successful_test_returns_response() -> None:
    responses = {"scoreboard players test Bananakundao mente 1": "Score 1 is in range 1 to 1"}

    async def _run() -> str:
        async with RconSession("127.0.0.1", 19132, "secret", client_factory=_factory(responses=responses)) as session:
            return await session.send("scoreboard players test Bananakundao mente 1")

    assert asyncio.run(_run()) == "Score 1 is in range 1 to 1"


def test_failed_test_raises_probe_rejected() -> None:
    responses = {"scoreboard players test Bananakundao mente 1": "Score 0 is NOT in range 1 to 1"}

    async def _run() -> None:
        async with RconSession("127.0.0.1", 19132, "secret", client_factory=_factory(responses=responses)) as session:
            await session.send("scoreboard players test Bananakundao mente 1")

    with pytest.raises(ProbeRejected) as excinfo:
        asyncio.run(_run())
    assert excinfo.value.response == "Score 0 is NOT in range 1 to 1"


def test_bad_password_raises_and_closes_client() -> None:
    FakeRconClient.instances.clear()

    async def _run() -> None:
        async with RconSession("127.0.0.1", 19132, "wrong", client_factory=_factory()):
            pass

    with pytest.raises(RconAuthError):
        asyncio.run(_run())
    assert FakeRconClient.instances[-1].closed
