from .ws_client import WebSocketTransport, ConnectionState
from .rcon_client import RconSession, RconError, RconAuthError, ProbeRejected
from .commands import Hypothesis, PendingRequests, CommandIssuer, testfor_command, scoreboard_test_command
from .classifier import ResponseClassifier, classify_status_message, classify_session
from .sinks import StatusSink, LocalFileSink, GitHubContentsSink, SinkError
from .publisher import StatusState, StatusPublisher
from .poller import StatusPoller
from .bridge import StatusBridge, WebSocketStatusBridge, RconStatusBridge

__all__ = (
    "WebSocketTransport",
    "ConnectionState",
    "RconSession",
    "RconError",
    "RconAuthError",
    "ProbeRejected",
    "Hypothesis",
    "PendingRequests",
    "CommandIssuer",
    "testfor_command",
    "scoreboard_test_command",
    "ResponseClassifier",
    "classify_status_message",
    "classify_session",
    "StatusSink",
    "LocalFileSink",
    "GitHubContentsSink",
    "SinkError",
    "StatusState",
    "StatusPublisher",
    "StatusPoller",
    "StatusBridge",
    "WebSocketStatusBridge",
    "RconStatusBridge"
)
