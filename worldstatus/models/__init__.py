from .status import WorldStatus, StatusStyle, StatusRecord, STATUS_MESSAGES, STATUS_LABELS, format_timestamp
from .messages import CommandRequest, InboundMessage, COMMAND_REQUEST, COMMAND_RESPONSE
from .config import (
    Port,
    TransportKind,
    SinkKind,
    WebSocketSettings,
    RconSettings,
    ProbeSettings,
    GitHubSettings,
    FileSettings,
    Config
)

__all__ = (
    "WorldStatus",
    "StatusStyle",
    "StatusRecord",
    "STATUS_MESSAGES",
    "STATUS_LABELS",
    "format_timestamp",
    "CommandRequest",
    "InboundMessage",
    "COMMAND_REQUEST",
    "COMMAND_RESPONSE",
    "Port",
    "TransportKind",
    "SinkKind",
    "WebSocketSettings",
    "RconSettings",
    "ProbeSettings",
    "GitHubSettings",
    "FileSettings",
    "Config"
)
