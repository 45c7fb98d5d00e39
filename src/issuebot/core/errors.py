"""Bot domain exceptions."""

from __future__ import annotations


class IssueBotError(Exception):
    """Base for bot domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class BotConfigurationError(IssueBotError):
    """Config validation or load failure."""


class MalformedReferenceError(IssueBotError):
    """A captured issue reference could not be parsed as a finite number."""


class IssueFetchError(IssueBotError):
    """Base for failed tracker lookups. Always terminal for one reference."""


class TransportError(IssueFetchError):
    """Network-level failure (DNS, connect, TLS, read)."""


class HttpStatusError(IssueFetchError):
    """Tracker answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        *,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(
            message or f"tracker returned HTTP {status_code}",
            code="http_status",
            details=details,
        )
        self.status_code = status_code


class DecodeError(IssueFetchError):
    """Response body is not JSON or does not look like an issue."""
