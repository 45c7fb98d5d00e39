"""Bot entrypoint. Loads config, wires handlers onto the bus, runs until signalled."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from loguru import logger

from issuebot import __version__
from issuebot.adapters.irc import IRCAdapter
from issuebot.chatlog import ChannelLogger
from issuebot.config import Config, load_config_with_env
from issuebot.core.errors import BotConfigurationError
from issuebot.gateway import Bus
from issuebot.issues import IssueReferenceHandler, TrackerClient
from issuebot.karma import KarmaHandler, KarmaStore
from issuebot.session import ChatSession
from issuebot.triggers import TriggerHandler


def _operator_filter(record) -> bool:
    # Chat log records go to their channel files only
    return "chatlog" not in record["extra"]


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. Replace default logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan> | {message}"
        ),
        filter=_operator_filter,
    )


def load_settings(config_path: Path) -> Config:
    """Load and validate config from path."""
    config = Config()
    config.reload(load_config_with_env(config_path))
    return config


def build(config: Config) -> tuple[Bus, ChatSession, IRCAdapter]:
    """Create the bus and register the session, handlers and IRC adapter on it."""
    bus = Bus()
    session = ChatSession(bus, ChannelLogger(config.log_location))
    bus.register(session)

    tracker = TrackerClient(
        config.github_owner,
        config.github_repo,
        config.github_token,
        base_url=config.tracker_base_url,
    )
    bus.register(
        IssueReferenceHandler(
            bus,
            session,
            tracker,
            nickname=config.nickname,
            guarded_nick=config.guarded_nick,
            max_references=config.max_references_per_message,
        )
    )
    bus.register(TriggerHandler(bus, guarded_nick=config.guarded_nick))
    bus.register(
        KarmaHandler(bus, session, KarmaStore(config.karma_path), guarded_nick=config.guarded_nick)
    )

    adapter = IRCAdapter(bus, config)
    return bus, session, adapter


def main() -> None:
    """Main entrypoint."""
    parser = argparse.ArgumentParser(
        description="issuebot — IRC bot that looks up #<number> issue references"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args()

    setup_logging(args.verbose)

    if not args.config.exists():
        logger.error("Config file not found: {}", args.config)
        sys.exit(1)

    try:
        config = load_settings(args.config)
    except BotConfigurationError as exc:
        logger.error("Invalid config {}: {} ({})", args.config, exc, exc.code)
        sys.exit(1)
    logger.info("Config loaded from {}", args.config)

    _, session, adapter = build(config)
    asyncio.run(_run(session, adapter, drain_timeout=config.shutdown_drain_seconds))


def _on_signal(sig: signal.Signals, stop: asyncio.Event) -> None:
    logger.info("Received {} signal", sig.name)
    stop.set()


async def _run(session: ChatSession, adapter: IRCAdapter, *, drain_timeout: float) -> None:
    """Async run loop. Connect, then wait for SIGINT/SIGTERM."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal, sig, stop)

    await adapter.start()
    await stop.wait()

    logger.info("Shutting down")
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.remove_signal_handler(sig)
    await session.drain(drain_timeout)
    await adapter.stop()
    await session.close()


if __name__ == "__main__":
    main()
