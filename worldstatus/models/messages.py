import uuid
from typing import Any
from pydantic import BaseModel, ConfigDict, Field

COMMAND_REQUEST = "commandRequest"
COMMAND_RESPONSE = "commandResponse"

class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

class RequestHeader(WireModel):
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="requestId")
    message_purpose: str = Field(default=COMMAND_REQUEST, alias="messagePurpose")
    version: int = 1

class CommandOrigin(WireModel):
    type: str = "player"

class CommandRequestBody(WireModel):
    origin: CommandOrigin = CommandOrigin()
    command_line: str = Field(alias="commandLine")
    version: int = 1

class CommandRequest(WireModel):
    """Outbound command over the game's WebSocket command interface"""
    header: RequestHeader
    body: CommandRequestBody

    @classmethod
    def create(cls, command_line: str, request_id: str | None=None):
        header = RequestHeader() if request_id is None else RequestHeader(request_id=request_id)
        return cls(header=header, body=CommandRequestBody(command_line=command_line))

    @property
    def request_id(self) -> str:
        return self.header.request_id

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True)

class InboundHeader(WireModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_id: str | None = Field(default=None, alias="requestId")
    message_purpose: str | None = Field(default=None, alias="messagePurpose")

class InboundMessage(WireModel):
    """Anything the server pushes to us: command responses, events, errors"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    header: InboundHeader = InboundHeader()
    body: dict[str, Any] = {}

    @property
    def is_command_response(self) -> bool:
        return self.header.message_purpose == COMMAND_RESPONSE

    @property
    def status_message(self) -> str | None:
        value = self.body.get("statusMessage")
        return value if isinstance(value, str) else None
