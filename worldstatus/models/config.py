import os
import enum
import json
from pathlib import Path
from typing import Annotated
from pydantic import BaseModel, Field, SecretStr, PositiveFloat, NonNegativeFloat, NonNegativeInt, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

#
# Project imports
#
from .status import StatusStyle

Port = Annotated[int, Field(gt=0, le=65535)]

class TransportKind(str, enum.Enum):
    WEBSOCKET = "websocket"
    RCON = "rcon"

    def __str__(self):
        return self.value

class SinkKind(str, enum.Enum):
    GITHUB = "github"
    FILE = "file"

    def __str__(self):
        return self.value

class WebSocketSettings(BaseModel):
    host: str = "localhost"
    port: Port = 19131
    reconnect_interval: PositiveFloat = 30
    max_reconnect_interval: PositiveFloat | None = None  # Enables exponential backoff when set
    stagger: NonNegativeFloat = 1
    accept_unmatched_responses: bool = False

class RconSettings(BaseModel):
    host: str = "127.0.0.1"
    port: Port = 19132
    password: SecretStr = SecretStr("")

class ProbeSettings(BaseModel):
    entity_name: str = "Bananakundao"
    score_name: str = "mente"

class GitHubSettings(BaseModel):
    owner: str | None = None
    repo: str | None = None
    token: SecretStr | None = None
    path: str = "open.json"
    branch: str | None = None
    api_url: str = "https://api.github.com"

class FileSettings(BaseModel):
    path: Path = Path("public/open.json")
    style: StatusStyle | None = None
    indent: NonNegativeInt | None = None

# Defaults that depend on the transport variant
VARIANT_DEFAULTS = {
    TransportKind.WEBSOCKET: {"sink": SinkKind.GITHUB, "interval": 60, "always_write": False, "style": StatusStyle.CODE},
    TransportKind.RCON: {"sink": SinkKind.FILE, "interval": 5, "always_write": True, "style": StatusStyle.LABEL},
}

def _present(value: str | SecretStr | None) -> bool:
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    return bool(value)

class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WORLDSTATUS_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore"
    )

    transport: TransportKind = TransportKind.WEBSOCKET
    sink: SinkKind | None = None
    interval: PositiveFloat | None = None
    always_write: bool | None = None
    debug: bool = False

    websocket: WebSocketSettings = Field(default_factory=WebSocketSettings)
    rcon: RconSettings = Field(default_factory=RconSettings)
    probe: ProbeSettings = Field(default_factory=ProbeSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    file: FileSettings = Field(default_factory=FileSettings)

    @model_validator(mode="after")
    def resolve_variant(self):
        defaults = VARIANT_DEFAULTS[self.transport]
        if self.sink is None:
            self.sink = defaults["sink"]
        if self.interval is None:
            self.interval = defaults["interval"]
        if self.always_write is None:
            self.always_write = defaults["always_write"]
        if self.file.style is None:
            self.file.style = defaults["style"]

        if self.github.token is None and (token := os.environ.get("GITHUB_TOKEN")):
            self.github.token = SecretStr(token)

        if self.sink == SinkKind.GITHUB:
            missing = [name for name in ("owner", "repo", "token") if not _present(getattr(self.github, name))]
            if missing:
                raise ValueError(f"GitHub sink requires github.{', github.'.join(missing)}")
        return self

    @classmethod
    def load(cls, path: Path | None=None):
        """Build the config from the environment, with values from the JSON
        file at `path` (if it exists and is not empty) taking precedence"""
        if path is not None and path.is_file() and path.stat().st_size > 0:
            return cls(**json.loads(path.read_text()))
        return cls()
