"""Karma counters: ``nick++`` / ``nick--`` and ``#karma nick``."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path

from loguru import logger

from issuebot.core.constants import GUARDED_NICK
from issuebot.events import ChatMessage, action_out
from issuebot.gateway import Bus
from issuebot.session import ChatSession

_NICK = r"[A-Za-z\[\]\\`_^{|}][A-Za-z0-9\[\]\\`_^{|}-]*?"
KARMA_VOTE_RE = re.compile(rf"(?<!\S)({_NICK})(\+\+|--)(?!\S)")
KARMA_QUERY_RE = re.compile(rf"#karma\s+({_NICK})(?!\S)")


class KarmaStore:
    """Karma per nick (case-insensitive). Persisted as a JSON object when path is set."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._karma: dict[str, int] = {}
        if path is not None and path.exists():
            self._load(path)

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to read karma file {}: {}", path, exc)
            return
        if not isinstance(data, dict):
            logger.warning("Karma file {} has invalid structure (expected object)", path)
            return
        self._karma = {
            str(k).lower(): int(v)
            for k, v in data.items()
            if isinstance(v, int) and not isinstance(v, bool)
        }

    def get(self, nick: str) -> int:
        return self._karma.get(nick.lower(), 0)

    def adjust(self, nick: str, delta: int) -> int:
        total = self.get(nick) + delta
        self._karma[nick.lower()] = total
        self._save()
        return total

    def _save(self) -> None:
        if self._path is None:
            return
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(self._karma, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            logger.error("Failed to write karma file {}: {}", self._path, exc)


class KarmaHandler:
    """Counts karma votes for nicks present in the channel."""

    def __init__(
        self,
        bus: Bus,
        session: ChatSession,
        store: KarmaStore,
        *,
        guarded_nick: str = GUARDED_NICK,
    ) -> None:
        self._bus = bus
        self._session = session
        self._store = store
        self._guarded = guarded_nick.lower()

    def accept_event(self, source: str, evt: object) -> bool:
        return (
            isinstance(evt, ChatMessage)
            and not evt.is_action
            and evt.author.lower() != self._guarded
        )

    def push_event(self, source: str, evt: object) -> None:
        if not isinstance(evt, ChatMessage):
            return
        for m in KARMA_QUERY_RE.finditer(evt.content):
            nick = m.group(1)
            self._reply(evt.channel, f"reports that {nick} has {self._store.get(nick)} karma")

        for m in KARMA_VOTE_RE.finditer(evt.content):
            nick, op = m.group(1), m.group(2)
            if not self._session.in_channel(evt.channel, nick):
                continue
            if nick.lower() == evt.author.lower():
                self._reply(evt.channel, f"thinks {nick} shouldn't be voting for themselves")
                continue
            if op == "++":
                total = self._store.adjust(nick, 1)
                self._reply(evt.channel, f"gives karma to {nick} ({total})")
            else:
                total = self._store.adjust(nick, -1)
                self._reply(evt.channel, f"takes karma from {nick} ({total})")

    def _reply(self, channel: str, text: str) -> None:
        _, out = action_out(channel, text)
        self._bus.publish("karma", out)
