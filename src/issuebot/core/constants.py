"""Bot constants."""

from __future__ import annotations

from typing import Literal

# Another bot running the same rules on the same channels; never answer it.
GUARDED_NICK = "[BoltGitHubBot]"

DEFAULT_NICKNAME = "issuebot"
DEFAULT_TRACKER_URL = "https://api.github.com"
QUIT_MESSAGE = "Drop bear spotted… I'm out of here!"

OutboundKind = Literal["notice", "action"]
