"""Config schema and accessor."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger

from issuebot.core.constants import DEFAULT_NICKNAME, DEFAULT_TRACKER_URL, GUARDED_NICK
from issuebot.core.errors import BotConfigurationError

_REQUIRED = (
    ("irc.host", "missing_host", "host is required"),
    ("github.token", "missing_token", "token is required"),
    ("github.owner", "missing_owner", "owner is required"),
    ("github.repos", "missing_repos", "repos is required"),
)


class Config:
    """Config accessor with attribute-style access for nested keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data."""
        self._data = data or {}
        if validate:
            self._validate()
        logger.debug("Config loaded: {} channels", len(self.channels))

    def _validate(self) -> None:
        """Validate config structure; raise BotConfigurationError on failure."""
        for key, code, message in _REQUIRED:
            if not self.get(key):
                raise BotConfigurationError(message, code=code, details={"key": key})
        channels = self.get("irc.channels")
        if channels is not None and not isinstance(channels, list):
            raise BotConfigurationError(
                "irc.channels must be a list",
                code="invalid_channels",
                details={"type": type(channels).__name__},
            )

    @property
    def raw(self) -> dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get value by dot-separated path (e.g. 'github.owner')."""
        parts = key.split(".")
        obj: Any = self._data
        for part in parts:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @property
    def irc_host(self) -> str:
        return str(self.get("irc.host", ""))

    @property
    def irc_ssl(self) -> bool:
        return bool(self.get("irc.ssl", False))

    @property
    def irc_port(self) -> int:
        return int(self.get("irc.port") or (6697 if self.irc_ssl else 6667))

    @property
    def irc_tls_verify(self) -> bool:
        return not bool(self.get("irc.ssl_verify_skip", False))

    @property
    def nickname(self) -> str:
        return str(self.get("irc.nickname") or DEFAULT_NICKNAME)

    @property
    def irc_password(self) -> str | None:
        val = self.get("irc.password")
        return str(val) if val else None

    @property
    def channels(self) -> list[str]:
        val = self.get("irc.channels")
        if isinstance(val, list):
            return [str(c) for c in val]
        return []

    @property
    def irc_throttle_limit(self) -> int:
        return int(self.get("irc.throttle_limit", 10))

    @property
    def github_token(self) -> str:
        return str(self.get("github.token", ""))

    @property
    def github_owner(self) -> str:
        return str(self.get("github.owner", ""))

    @property
    def github_repo(self) -> str:
        return str(self.get("github.repos", ""))

    @property
    def tracker_base_url(self) -> str:
        return str(self.get("github.base_url") or DEFAULT_TRACKER_URL)

    @property
    def karma_path(self) -> Path | None:
        """Karma JSON file; None keeps karma in memory only."""
        val = self.get("database.karma")
        return Path(val) if val else None

    @property
    def log_location(self) -> Path | None:
        """Directory for per-channel chat logs; None disables chat logging."""
        val = self.get("logging.location")
        return Path(val) if val else None

    @property
    def guarded_nick(self) -> str:
        return str(self._data.get("guarded_nick") or GUARDED_NICK)

    @property
    def max_references_per_message(self) -> int:
        return int(self._data.get("max_references_per_message", 5))

    @property
    def shutdown_drain_seconds(self) -> float:
        return float(self._data.get("shutdown_drain_seconds", 5))
