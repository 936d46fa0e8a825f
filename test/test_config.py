from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from worldstatus.main import build_bridge, build_sink
from worldstatus.core import GitHubContentsSink, LocalFileSink, RconStatusBridge, WebSocketStatusBridge
from worldstatus.models import Config, SinkKind, StatusStyle, TransportKind


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.chdir(Path(__file__).parent)


def test_rcon_variant_defaults() -> None:
    config = Config(transport="rcon")
    assert config.sink == SinkKind.FILE
    assert config.interval == 5
    assert config.always_write is True
    assert config.file.style == StatusStyle.LABEL
    assert config.file.path == Path("public/open.json")


def test_websocket_variant_requires_github_credentials() -> None:
    with pytest.raises(ValidationError, match="github.owner"):
        Config()


def test_websocket_variant_with_github_token_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")
    config = Config(github={"owner": "Banana-Niku87729", "repo": "MCSptr_WebSite"})
    assert config.transport == TransportKind.WEBSOCKET
    assert config.sink == SinkKind.GITHUB
    assert config.interval == 60
    assert config.always_write is False
    assert config.github.token.get_secret_value() == "ghp_example"
    assert config.websocket.reconnect_interval == 30


def test_nested_settings_from_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("WORLDSTATUS_TRANSPORT", "rcon")
    monkeypatch.setenv("WORLDSTATUS_RCON__PORT", "25575")
    monkeypatch.setenv("WORLDSTATUS_PROBE__ENTITY_NAME", "Marker")
    config = Config()
    assert config.transport == TransportKind.RCON
    assert config.rcon.port == 25575
    assert config.probe.entity_name == "Marker"


def test_load_from_json_file(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"transport": "rcon", "interval": 10, "file": {"path": str(tmp_path / "open.json")}}))
    config = Config.load(path)
    assert config.interval == 10
    assert config.file.path == tmp_path / "open.json"

    monkeypatch.setenv("WORLDSTATUS_TRANSPORT", "rcon")
    assert Config.load(tmp_path / "missing.json").transport == TransportKind.RCON


def test_build_bridge_follows_transport(monkeypatch) -> None:
    rcon = Config(transport="rcon")
    assert isinstance(build_sink(rcon), LocalFileSink)
    assert isinstance(build_bridge(rcon), RconStatusBridge)

    monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")
    websocket = Config(github={"owner": "owner", "repo": "site"})
    assert isinstance(build_sink(websocket), GitHubContentsSink)
    bridge = build_bridge(websocket)
    assert isinstance(bridge, WebSocketStatusBridge)
    assert bridge.transport.uri == "ws://localhost:19131"


def test_cli_rejects_invalid_config(tmp_path: Path) -> None:
    from worldstatus.main import main

    path = tmp_path / "config.json"
    path.write_text(json.dumps({"transport": "websocket", "sink": "github"}))
    assert main(["--config", str(path)]) == 1
