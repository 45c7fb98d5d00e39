"""Event types and dispatcher: typed events, central dispatcher."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger


@dataclass(frozen=True)
class ChatMessage:
    """Inbound channel message (PRIVMSG). Read-only to handlers."""

    channel: str
    author: str
    content: str
    is_action: bool = False
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class NoticeOut:
    """Outbound NOTICE to a channel."""

    channel: str
    content: str


@dataclass(frozen=True)
class ActionOut:
    """Outbound CTCP ACTION (/me) to a channel."""

    channel: str
    content: str


@dataclass(frozen=True)
class ChannelJoined:
    """The bot itself joined a channel."""

    channel: str


@dataclass(frozen=True)
class NamesReply:
    """RPL_NAMREPLY (353): nicks present in a channel, mode prefixes stripped."""

    channel: str
    nicks: tuple[str, ...]


@dataclass(frozen=True)
class Disconnected:
    """Connection to the IRC server was lost or closed."""

    expected: bool = True


class EventTarget(Protocol):
    """Handler interface: accept_event + push_event."""

    def accept_event(self, source: str, evt: object) -> bool:
        """Return True if this target wants the event."""
        ...

    def push_event(self, source: str, evt: object) -> None:
        """Handle the event (may be async via task or queue)."""
        ...


def event(type_name: str):
    """Decorator to mark a factory as producing an event with a given type."""

    def decorator(f: Any) -> Any:
        @functools.wraps(f)
        def wrapper(*args: Any, **kwargs: Any) -> tuple[str, object]:
            evt = f(*args, **kwargs)
            return (type_name, evt)

        wrapper.TYPE = type_name
        return wrapper

    return decorator


@event("chat_message")
def chat_message(
    channel: str,
    author: str,
    content: str,
    *,
    is_action: bool = False,
    raw: dict[str, Any] | None = None,
) -> ChatMessage:
    return ChatMessage(
        channel=channel,
        author=author,
        content=content,
        is_action=is_action,
        raw=raw or {},
    )


@event("notice_out")
def notice_out(channel: str, content: str) -> NoticeOut:
    return NoticeOut(channel=channel, content=content)


@event("action_out")
def action_out(channel: str, content: str) -> ActionOut:
    return ActionOut(channel=channel, content=content)


@event("channel_joined")
def channel_joined(channel: str) -> ChannelJoined:
    return ChannelJoined(channel=channel)


@event("names_reply")
def names_reply(channel: str, nicks: list[str] | tuple[str, ...]) -> NamesReply:
    return NamesReply(channel=channel, nicks=tuple(nicks))


@event("disconnected")
def disconnected(expected: bool = True) -> Disconnected:
    return Disconnected(expected=expected)


class Dispatcher:
    """Central event dispatcher; targets filter by type and receive events."""

    def __init__(self) -> None:
        self._targets: list[EventTarget] = []

    def register(self, target: EventTarget) -> None:
        """Register an event target."""
        self._targets.append(target)

    def unregister(self, target: EventTarget) -> None:
        """Unregister an event target."""
        if target in self._targets:
            self._targets.remove(target)

    def dispatch(self, source: str, evt: object) -> None:
        """Offer evt to every target in registration order.

        A target that raises is logged and skipped; the rest still receive the event.
        """
        for target in list(self._targets):
            try:
                if target.accept_event(source, evt):
                    target.push_event(source, evt)
            except Exception:
                logger.exception(
                    "{} failed on {} from {}", type(target).__name__, type(evt).__name__, source
                )
