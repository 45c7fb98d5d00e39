"""GitHub issue tracker client.

Issue endpoint: GET /repos/{owner}/{repo}/issues/{number}?access_token={token}

Fields consumed from the response:
  number (float), title, state, html_url, assignee.login (optional)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from issuebot.core.constants import DEFAULT_TRACKER_URL
from issuebot.core.errors import DecodeError, HttpStatusError, TransportError


def _bad_field(name: str) -> DecodeError:
    return DecodeError(
        f"issue payload has a missing or mistyped {name!r}",
        code="bad_field",
        details={"field": name},
    )


@dataclass(frozen=True)
class Assignee:
    login: str


@dataclass(frozen=True)
class IssueRecord:
    """One issue as returned by the tracker. ``number`` stays a float, as JSON delivers it."""

    number: float
    title: str
    state: str
    html_url: str
    assignee: Assignee | None = None

    @classmethod
    def from_json(cls, data: Any) -> IssueRecord:
        """Decode a JSON object into an IssueRecord. Raises DecodeError on bad shape."""
        if not isinstance(data, dict):
            raise DecodeError(
                "issue payload is not an object",
                code="not_object",
                details={"type": type(data).__name__},
            )
        number = data.get("number")
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            raise _bad_field("number")
        fields: dict[str, str] = {}
        for name in ("title", "state", "html_url"):
            val = data.get(name)
            if not isinstance(val, str):
                raise _bad_field(name)
            fields[name] = val

        assignee: Assignee | None = None
        raw_assignee = data.get("assignee")
        if raw_assignee is not None:
            login = raw_assignee.get("login") if isinstance(raw_assignee, dict) else None
            if not isinstance(login, str):
                raise _bad_field("assignee.login")
            assignee = Assignee(login=login)

        try:
            value = float(number)
        except OverflowError as exc:
            raise _bad_field("number") from exc
        return cls(number=value, assignee=assignee, **fields)


class TrackerClient:
    """Async client for the GitHub issues API. One fixed repository, no retries, no cache."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        *,
        base_url: str = DEFAULT_TRACKER_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._owner = owner
        self._repo = repo
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def repo(self) -> str:
        return self._repo

    def issue_url(self, magnitude: str) -> str:
        return f"{self._base_url}/repos/{self._owner}/{self._repo}/issues/{magnitude}"

    async def fetch_issue(self, magnitude: str) -> IssueRecord:
        """Fetch one issue by number.

        Raises TransportError, HttpStatusError or DecodeError.
        """
        url = self.issue_url(magnitude)
        params = {"access_token": self._token}
        headers = {"Accept": "application/json"}
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(url, params=params, headers=headers)
        except httpx.TransportError as exc:
            raise TransportError(
                f"request for issue {magnitude} failed: {exc}",
                code="transport",
                original_error=exc,
            ) from exc
        except httpx.DecodingError as exc:
            raise DecodeError(
                f"issue {magnitude}: cannot decode response body: {exc}",
                code="bad_encoding",
                original_error=exc,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"request for issue {magnitude} failed: {exc}",
                code="request",
                original_error=exc,
            ) from exc

        if not resp.is_success:
            raise HttpStatusError(
                resp.status_code,
                f"issue {magnitude}: HTTP {resp.status_code} {resp.reason_phrase}",
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise DecodeError(
                f"issue {magnitude}: body is not JSON",
                code="invalid_json",
                original_error=exc,
            ) from exc

        issue = IssueRecord.from_json(data)
        logger.debug("Fetched issue #{} ({})", magnitude, issue.state)
        return issue
