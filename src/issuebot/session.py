"""Connection session: roster, chat logs and background tasks for one IRC connection."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Coroutine
from typing import Any

from loguru import logger

from issuebot.chatlog import ChannelLogger
from issuebot.events import ChannelJoined, ChatMessage, Disconnected, NamesReply
from issuebot.gateway import Bus


class ChatSession:
    """Owns the state that outlives a single message.

    Handler tasks are drained on shutdown; deferred follow-ups are cancelled
    when the connection goes away.
    """

    def __init__(self, bus: Bus, chatlog: ChannelLogger | None = None) -> None:
        self._bus = bus
        self.chatlog = chatlog or ChannelLogger(None)
        self._roster: dict[str, set[str]] = {}
        self._tasks: set[asyncio.Task] = set()
        self._deferred: set[asyncio.Task] = set()

    # -- roster -----------------------------------------------------------

    def roster(self, channel: str) -> frozenset[str]:
        return frozenset(self._roster.get(channel.lower(), ()))

    def in_channel(self, channel: str, nick: str) -> bool:
        return nick.lower() in {n.lower() for n in self._roster.get(channel.lower(), ())}

    # -- tasks ------------------------------------------------------------

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @property
    def deferred(self) -> int:
        return len(self._deferred)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task:
        """Run a handler coroutine as a tracked task; failures are logged, not raised."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("Handler task {} failed", task.get_name())

    def defer(self, delay: float, source: str, evt: object) -> asyncio.Task:
        """Publish evt on the bus after delay seconds, unless cancelled first."""

        async def _fire() -> None:
            await asyncio.sleep(delay)
            self._bus.publish(source, evt)

        task = asyncio.create_task(_fire())
        self._deferred.add(task)
        task.add_done_callback(self._deferred.discard)
        return task

    def cancel_deferred(self) -> int:
        """Cancel follow-ups that have not fired yet. Returns how many were cancelled."""
        count = 0
        for task in list(self._deferred):
            if not task.done():
                task.cancel()
                count += 1
        if count:
            logger.debug("Cancelled {} deferred follow-up(s)", count)
        return count

    async def drain(self, timeout: float) -> None:
        """Wait up to timeout seconds for handler tasks, then cancel the rest."""
        self.cancel_deferred()
        if not self._tasks:
            return
        tasks = list(self._tasks)
        logger.info("Waiting up to {}s for {} handler task(s)", timeout, len(tasks))
        _, still_running = await asyncio.wait(tasks, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning("Cancelled {} handler task(s) on shutdown", len(still_running))

    async def close(self) -> None:
        self.cancel_deferred()
        for task in list(self._deferred):
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.chatlog.close()

    # -- event target -----------------------------------------------------

    def accept_event(self, source: str, evt: object) -> bool:
        return isinstance(evt, (ChatMessage, NamesReply, ChannelJoined, Disconnected))

    def push_event(self, source: str, evt: object) -> None:
        if isinstance(evt, ChatMessage):
            self.chatlog.write(evt.channel, evt.author, evt.content)
        elif isinstance(evt, NamesReply):
            self._roster.setdefault(evt.channel.lower(), set()).update(evt.nicks)
        elif isinstance(evt, ChannelJoined):
            self._roster[evt.channel.lower()] = set()
            self.chatlog.open(evt.channel)
        elif isinstance(evt, Disconnected):
            self.cancel_deferred()
