"""issuebot: IRC bot that resolves #<number> issue references against GitHub."""

__version__ = "0.3.0"
