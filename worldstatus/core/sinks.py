import base64
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Self
import aiohttp

#
# Project imports
#
from worldstatus.models import StatusRecord, StatusStyle

logger = logging.getLogger(__name__)

class SinkError(RuntimeError):
    def __init__(self, message: str, status_code: int | None=None):
        super().__init__(message)
        self.status_code = status_code

class StatusSink(ABC):
    """Durable copy of the published status. Sinks are async context
    managers so they can hold on to network sessions."""
    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args) -> bool:
        return False

    @abstractmethod
    async def write(self, record: StatusRecord):
        pass

class LocalFileSink(StatusSink):
    """Overwrites a local file on every write. Last writer wins."""
    def __init__(self, path: Path, style: StatusStyle=StatusStyle.CODE, indent: int | None=None):
        self.path = Path(path)
        self.style = style
        self.indent = indent

    async def write(self, record: StatusRecord):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(record.to_json(self.style, self.indent), encoding="utf-8")
        logger.debug("Wrote %s to %s", record.status, self.path)

    def __repr__(self):
        return f"LocalFileSink('{self.path}')"

class GitHubContentsSink(StatusSink):
    """Commits the status file to a GitHub repository through the contents
    API. The current blob sha is read first so a write never clobbers a
    change made by someone else in between."""
    COMMIT_MESSAGE = "Update world status: {status}"
    INDENT = 2

    def __init__(
            self,
            owner: str,
            repo: str,
            token: str,
            path: str="open.json",
            branch: str | None=None,
            api_url: str="https://api.github.com",
            session: aiohttp.ClientSession | None=None
        ):
        self.owner = owner
        self.repo = repo
        self.token = token
        self.path = path
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    @property
    def url(self) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/contents/{self.path}"

    @property
    def headers(self) -> dict[str, str]:
        return {
            "accept": "application/vnd.github+json",
            "authorization": f"Bearer {self.token}",
            "x-github-api-version": "2022-11-28",
        }

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def __aexit__(self, *args) -> bool:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
        return False

    async def read_sha(self) -> str | None:
        """Current blob sha of the status file, or None if it does not exist yet"""
        params = {"ref": self.branch} if self.branch else None
        try:
            async with self.session.get(self.url, headers=self.headers, params=params) as resp:
                if resp.status == 404:
                    logger.info("%s does not exist yet, it will be created", self.path)
                    return None
                if resp.status != 200:
                    text = await resp.text()
                    raise SinkError(f"HTTP {resp.status} reading {self.path}: {text[:200]}", status_code=resp.status)
                body = await resp.json()
        except aiohttp.ClientError as err:
            raise SinkError(f"Reading {self.path} failed: {err}") from err
        return body.get("sha") if isinstance(body, dict) else None

    async def write(self, record: StatusRecord):
        sha = await self.read_sha()
        content = record.to_json(StatusStyle.CODE, self.INDENT)
        payload = {
            "message": self.COMMIT_MESSAGE.format(status=record.status.value),
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if sha is not None:
            payload["sha"] = sha
        if self.branch:
            payload["branch"] = self.branch

        try:
            async with self.session.put(self.url, headers=self.headers, json=payload) as resp:
                if resp.status not in (200, 201):
                    text = await resp.text()
                    raise SinkError(f"HTTP {resp.status} writing {self.path}: {text[:200]}", status_code=resp.status)
        except aiohttp.ClientError as err:
            raise SinkError(f"Writing {self.path} failed: {err}") from err
        logger.debug("Committed %s to %s/%s:%s", record.status, self.owner, self.repo, self.path)

    def __repr__(self):
        return f"GitHubContentsSink('{self.owner}/{self.repo}:{self.path}')"
