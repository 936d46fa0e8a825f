import re
import logging
from typing import Self
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from mctools import AsyncRCONClient

logger = logging.getLogger(__name__)

class RconError(RuntimeError):
    pass

class RconAuthError(RconError):
    pass

class ProbeRejected(RconError):
    """The server ran the command but reported that the test did not hold"""
    def __init__(self, command: str, response: str):
        super().__init__(f"{command!r} was rejected: {response!r}")
        self.command = command
        self.response = response

class RconSession(AbstractAsyncContextManager):
    """Short lived RCON session: connect and log in on enter, close on exit.

    Only commands whose response reports a satisfied test count as
    successful. `scoreboard players test` answers with
    "Score 1 is in range 1 to 1" on success and
    "Score 0 is NOT in range 1 to 1" otherwise.
    """
    SUCCESS_REGEX = re.compile(r"\bis in range\b")

    def __init__(
            self,
            host: str,
            port: int,
            password: str,
            client_factory=AsyncRCONClient
        ):
        self.host = host
        self.port = port
        self.password = password
        self.client_factory = client_factory

        self.client = None
        self.stack: AsyncExitStack

    async def __aenter__(self) -> Self:
        logger.debug("Connecting to RCON at %s:%s", self.host, self.port)
        self.stack = AsyncExitStack()
        await self.stack.__aenter__()
        try:
            self.client = await self.stack.enter_async_context(self.client_factory(self.host, self.port))
            if not await self.client.login(self.password):
                raise RconAuthError(f"RCON login to {self.host}:{self.port} failed")
        except BaseException as err:
            await self.stack.__aexit__(type(err), err, err.__traceback__)
            raise
        return self

    async def __aexit__(self, *args) -> bool:
        await self.stack.__aexit__(*args)
        self.client = None
        logger.debug("Closed RCON connection to %s:%s", self.host, self.port)
        return False

    async def send(self, command: str) -> str:
        response = await self.client.command(command)
        logger.debug("RCON %r -> %r", command, response)
        if not self.SUCCESS_REGEX.search(response or ""):
            raise ProbeRejected(command, response)
        return response
