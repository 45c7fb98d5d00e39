"""Gateway: event bus between the IRC transport and the handlers."""

from issuebot.gateway.bus import Bus

__all__ = ["Bus"]
