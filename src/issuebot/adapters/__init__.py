"""Chat transports. Each implements base.OutboundAdapter."""

from issuebot.adapters.base import OutboundAdapter
from issuebot.adapters.irc import IRCAdapter, IRCClient

__all__ = ["IRCAdapter", "IRCClient", "OutboundAdapter"]
