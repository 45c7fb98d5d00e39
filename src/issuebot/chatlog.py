"""Per-channel chat logs as loguru file sinks."""

from __future__ import annotations

import re
from pathlib import Path

from loguru import logger

CHATLOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} {extra[nick]}: {message}"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def log_filename(channel: str) -> str:
    """File name for a channel log; '#bolt' -> 'bolt.log'."""
    name = _UNSAFE.sub("_", channel.lstrip("#&")) or "_"
    return f"{name}.log"


def _channel_filter(channel: str):
    def _filter(record) -> bool:
        return record["extra"].get("chatlog") == channel

    return _filter


class ChannelLogger:
    """Writes each channel's conversation to ``{location}/{channel}.log``.

    Records are bound with ``chatlog=<channel>`` so the operator sink can skip them.
    """

    def __init__(self, location: Path | None) -> None:
        self._location = location
        self._sinks: dict[str, int] = {}

    @property
    def enabled(self) -> bool:
        return self._location is not None

    def is_open(self, channel: str) -> bool:
        return channel in self._sinks

    def open(self, channel: str) -> Path | None:
        """Start logging a channel. No-op when disabled or already open."""
        if self._location is None or channel in self._sinks:
            return None
        self._location.mkdir(parents=True, exist_ok=True)
        path = self._location / log_filename(channel)
        self._sinks[channel] = logger.add(
            path,
            level="INFO",
            format=CHATLOG_FORMAT,
            filter=_channel_filter(channel),
        )
        logger.info("Logging {} to {}", channel, path)
        return path

    def write(self, channel: str, nick: str, message: str) -> None:
        if channel not in self._sinks:
            return
        logger.bind(chatlog=channel, nick=nick).info(message)

    def close(self) -> None:
        """Remove every chat log sink (flushes and closes the files)."""
        for sink_id in self._sinks.values():
            logger.remove(sink_id)
        self._sinks.clear()
