"""Chat transport base: delivers the bot's outbound lines to a server."""

from __future__ import annotations

from abc import ABC, abstractmethod

from issuebot.events import ActionOut, NoticeOut

OutboundLine = NoticeOut | ActionOut


class OutboundAdapter(ABC):
    """Bus target for NoticeOut/ActionOut. Subclasses implement deliver, start and stop."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    def accept_event(self, source: str, evt: object) -> bool:
        return isinstance(evt, (NoticeOut, ActionOut))

    def push_event(self, source: str, evt: object) -> None:
        if isinstance(evt, (NoticeOut, ActionOut)):
            self.deliver(evt)

    @abstractmethod
    def deliver(self, line: OutboundLine) -> None:
        """Hand one outbound line to the transport. Must not block."""

    @abstractmethod
    async def start(self) -> None:
        """Connect and join channels."""

    @abstractmethod
    async def stop(self, message: str | None = None) -> None:
        """Quit with message and disconnect."""
