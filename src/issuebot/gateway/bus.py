"""Event bus: central dispatcher for transport and handler events."""

from __future__ import annotations

from issuebot.events import Dispatcher, EventTarget

__all__ = ["Bus", "EventTarget"]


class Bus:
    """Event bus wrapping the central dispatcher. Handlers register and receive events."""

    def __init__(self) -> None:
        self._dispatcher = Dispatcher()

    def register(self, target: EventTarget) -> None:
        """Register a handler or adapter as event target."""
        self._dispatcher.register(target)

    def unregister(self, target: EventTarget) -> None:
        """Unregister a target."""
        self._dispatcher.unregister(target)

    @property
    def targets(self) -> list[EventTarget]:
        """Registered targets, in dispatch order."""
        return list(self._dispatcher._targets)

    def publish(self, source: str, evt: object) -> None:
        """Publish event to all targets that accept it."""
        self._dispatcher.dispatch(source, evt)
