"""IRC adapter: pydle-based client bridged onto the event bus."""

from __future__ import annotations

import asyncio
import contextlib

import pydle
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from issuebot.adapters.base import OutboundAdapter, OutboundLine
from issuebot.adapters.irc_throttle import LinePacer
from issuebot.config import Config
from issuebot.core.constants import QUIT_MESSAGE
from issuebot.events import (
    ActionOut,
    channel_joined,
    chat_message,
    disconnected,
    names_reply,
)
from issuebot.formatting.line_split import split_line
from issuebot.gateway import Bus

# Backoff: min 2s, max 60s
_BACKOFF_MIN = 2
_BACKOFF_MAX = 60
_MAX_ATTEMPTS = 10

# Channel membership prefixes in RPL_NAMREPLY
_NICK_PREFIXES = "~&@%+"


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    wait = state.next_action.sleep if state.next_action else 0
    logger.warning(
        "IRC connect failed (attempt {}): {}, retrying in {:.1f}s",
        state.attempt_number,
        exc,
        wait,
    )


async def connect_with_retry(
    client: pydle.Client,
    hostname: str,
    port: int,
    *,
    tls: bool,
    tls_verify: bool = True,
    password: str | None = None,
    attempts: int = _MAX_ATTEMPTS,
) -> None:
    """Connect with exponential backoff; give up after attempts failures."""
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=_BACKOFF_MIN, max=_BACKOFF_MAX),
        retry=retry_if_exception_type(OSError),
        before_sleep=_log_retry,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            await client.connect(
                hostname=hostname,
                port=port,
                tls=tls,
                tls_verify=tls_verify,
                password=password,
            )


class IRCClient(pydle.Client):
    """Pydle IRC client publishing channel traffic on the bus."""

    def __init__(
        self,
        bus: Bus,
        nick: str,
        channels: list[str],
        throttle_limit: int = 10,
        **kwargs,
    ):
        super().__init__(nick, **kwargs)
        self._bus = bus
        self._channels = channels
        self._outbound: asyncio.Queue[OutboundLine] = asyncio.Queue()
        self._consumer_task: asyncio.Task | None = None
        self._pacer = LinePacer(burst=throttle_limit)

    async def on_connect(self):
        """After connect, join channels and start consumer."""
        await super().on_connect()
        logger.info("IRC connected as {}", self.nickname)
        for channel in self._channels:
            await self.join(channel)
        if self._consumer_task is None or self._consumer_task.done():
            self._consumer_task = asyncio.create_task(self._consume_outbound())

    async def on_join(self, channel: str, user: str) -> None:
        await super().on_join(channel, user)
        if user.lower() != self.nickname.lower():
            return
        logger.info("Joined {}", channel)
        _, evt = channel_joined(channel)
        self._bus.publish("irc", evt)

    async def on_raw_353(self, message) -> None:
        """RPL_NAMREPLY: <me> <type> <channel> :<nicks>."""
        await super().on_raw_353(message)
        params = getattr(message, "params", [])
        if len(params) < 4:
            return
        channel = params[2]
        nicks = [n.lstrip(_NICK_PREFIXES) for n in str(params[3]).split()]
        _, evt = names_reply(channel, [n for n in nicks if n])
        self._bus.publish("irc", evt)

    async def on_message(self, target, source, message):
        """Handle channel message."""
        await super().on_message(target, source, message)
        if not target.startswith("#"):
            return
        _, evt = chat_message(channel=target, author=source, content=message)
        self._bus.publish("irc", evt)

    async def on_ctcp_action(self, by, target, message):
        """Handle /me action; published for chat logging only."""
        await super().on_ctcp_action(by, target, message)
        if not target.startswith("#"):
            return
        _, evt = chat_message(channel=target, author=by, content=message, is_action=True)
        self._bus.publish("irc", evt)

    async def on_disconnect(self, expected: bool) -> None:
        await super().on_disconnect(expected)
        if expected:
            logger.info("IRC disconnected")
        else:
            logger.warning("IRC connection lost")
        _, evt = disconnected(expected)
        self._bus.publish("irc", evt)

    async def _consume_outbound(self):
        """Consume outbound queue with token bucket throttling."""
        while True:
            try:
                evt = await self._outbound.get()
                for chunk in split_line(evt.content):
                    await self._pacer.wait()
                    await self._send(evt, chunk)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.exception("IRC send failed: {}", exc)

    async def _send(self, evt: OutboundLine, text: str) -> None:
        if isinstance(evt, ActionOut):
            await self.ctcp(evt.channel, "ACTION", text)
        else:
            await self.notice(evt.channel, text)

    def queue_message(self, evt: OutboundLine) -> None:
        """Queue outbound line."""
        self._outbound.put_nowait(evt)

    async def disconnect(self, expected=True):
        """Disconnect and cleanup."""
        if self._consumer_task:
            self._consumer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer_task
            self._consumer_task = None
        await super().disconnect(expected)


class IRCAdapter(OutboundAdapter):
    """IRC transport: owns the pydle client and delivers NoticeOut/ActionOut."""

    def __init__(self, bus: Bus, config: Config) -> None:
        self._bus = bus
        self._config = config
        self._client: IRCClient | None = None

    @property
    def name(self) -> str:
        return "irc"

    @property
    def client(self) -> IRCClient | None:
        return self._client

    def deliver(self, line: OutboundLine) -> None:
        if self._client is None:
            logger.debug("IRC not connected; dropping line for {}", line.channel)
            return
        self._client.queue_message(line)

    async def start(self) -> None:
        """Connect to the server; channels are joined from on_connect."""
        cfg = self._config
        self._client = IRCClient(
            bus=self._bus,
            nick=cfg.nickname,
            channels=cfg.channels,
            throttle_limit=cfg.irc_throttle_limit,
            username=cfg.nickname,
        )
        self._bus.register(self)
        await connect_with_retry(
            self._client,
            hostname=cfg.irc_host,
            port=cfg.irc_port,
            tls=cfg.irc_ssl,
            tls_verify=cfg.irc_tls_verify,
            password=cfg.irc_password,
        )
        logger.info(
            "IRC connection started: {}:{}, channels {}",
            cfg.irc_host,
            cfg.irc_port,
            cfg.channels,
        )

    async def stop(self, message: str | None = None) -> None:
        """Send QUIT and disconnect."""
        self._bus.unregister(self)
        client = self._client
        self._client = None
        if client is None:
            return
        if client.connected:
            await client.quit(message or QUIT_MESSAGE)
        await client.disconnect()
