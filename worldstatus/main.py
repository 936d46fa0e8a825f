import os
import sys
import asyncio
import logging
import argparse
from functools import partial
from pathlib import Path
from pydantic import ValidationError
from rich_argparse import RichHelpFormatter

#
# Project imports
#
from worldstatus.models import Config, TransportKind, SinkKind
from worldstatus.core import (
    WebSocketTransport,
    RconSession,
    PendingRequests,
    CommandIssuer,
    ResponseClassifier,
    StatusSink,
    LocalFileSink,
    GitHubContentsSink,
    StatusState,
    StatusPublisher,
    StatusBridge,
    WebSocketStatusBridge,
    RconStatusBridge
)

logger = logging.getLogger(__name__)

def configure_logging(debug: bool):
    if debug:
        format = "%(levelname)s [%(asctime)s] [%(name)s.%(funcName)s:%(lineno)d] %(message)s"
        level = logging.DEBUG
    else:
        format = "%(levelname)s [%(asctime)s] %(message)s"
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format=format,
        handlers=[logging.StreamHandler(sys.stdout)]  # ensure logs go to stdout for Docker
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("worldstatus.supervisor.timer").setLevel(logging.WARNING)
    logger.info("Logging level is %s", logging.getLevelName(level))

def build_sink(config: Config) -> StatusSink:
    if config.sink == SinkKind.GITHUB:
        return GitHubContentsSink(
            owner=config.github.owner,
            repo=config.github.repo,
            token=config.github.token.get_secret_value(),
            path=config.github.path,
            branch=config.github.branch,
            api_url=config.github.api_url
        )
    return LocalFileSink(config.file.path, config.file.style, config.file.indent)

def build_bridge(config: Config, state: StatusState | None=None) -> StatusBridge:
    publisher = StatusPublisher(
        StatusState() if state is None else state,
        build_sink(config),
        always_write=config.always_write
    )

    if config.transport == TransportKind.RCON:
        session_factory = partial(
            RconSession,
            config.rcon.host,
            config.rcon.port,
            config.rcon.password.get_secret_value()
        )
        return RconStatusBridge(session_factory, config.probe, publisher, config.interval)

    transport = WebSocketTransport(
        config.websocket.host,
        config.websocket.port,
        reconnect_interval=config.websocket.reconnect_interval,
        max_reconnect_interval=config.websocket.max_reconnect_interval
    )
    pending = PendingRequests()
    issuer = CommandIssuer(transport, config.probe, pending, stagger=config.websocket.stagger)
    classifier = ResponseClassifier(pending, accept_unmatched=config.websocket.accept_unmatched_responses)
    return WebSocketStatusBridge(transport, issuer, classifier, publisher, config.interval)

def handle_exception(loop: asyncio.AbstractEventLoop, context: dict):
    # Last resort for errors nothing else caught; keep the loop alive
    err = context.get("exception")
    logger.error("Unhandled error: %s", context.get("message"), exc_info=err)

async def serve(config: Config):
    asyncio.get_running_loop().set_exception_handler(handle_exception)
    async with build_bridge(config) as bridge:
        logger.info("Publishing world status via %s to %s", config.transport, bridge.publisher.sink)
        await bridge.run()

def main(argv: list[str] | None=None) -> int:
    parser = argparse.ArgumentParser(
        prog="worldstatus",
        description="Mirror a Minecraft world's open/maintenance status to a file or GitHub repository",
        formatter_class=RichHelpFormatter
    )
    parser.add_argument("--config", "-c", type=Path, default=None, help="JSON config file. Environment variables prefixed with WORLDSTATUS_ fill in anything it leaves out.")
    parser.add_argument("--verbose", "-v", action="store_true", default=False, help="Enables verbose logging")
    args = parser.parse_args(argv)

    try:
        config = Config.load(args.config)
    except (ValidationError, ValueError) as err:
        configure_logging(args.verbose)
        logger.error("Invalid configuration: %s", err)
        return 1

    configure_logging(args.verbose or config.debug or os.environ.get("DEBUG", "").lower() == "true")
    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
    return 0

if __name__ == "__main__":
    sys.exit(main())
