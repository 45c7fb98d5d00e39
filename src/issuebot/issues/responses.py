"""Response selection for a resolved issue reference.

One decision table, evaluated top to bottom, first match wins:

  alternate (#-N)                      normal (#N)
  ---------------------------------    ---------------------------------
  1. N == -1     locale easter egg     5. number == 1     rule #1 + delayed action
  2. N == -1555  warn the author       6. number == 1555  warn the author (action)
  3. number % 1555 == 0  themed        7. default summary, delayed action
  4. default: Rövarspråket title          when number % 1555 == 0

Checks on ``number`` use the fetched issue, never the parsed reference.
"""

from __future__ import annotations

from dataclasses import dataclass

from issuebot.core.constants import OutboundKind
from issuebot.formatting.rovarspraket import encode
from issuebot.issues.references import ParsedReference, format_number
from issuebot.issues.tracker import IssueRecord

CURSED_NUMBER = 1555
RULE_ONE_DELAY = 5.0
SUSPICIOUS_DELAY = 2.0


@dataclass(frozen=True)
class Response:
    """One outbound line. ``delay`` > 0 means send it later as a follow-up."""

    kind: OutboundKind
    text: str
    delay: float = 0.0


def _issue_link(owner: str, repo: str, number: str) -> str:
    return f"https://github.com/{owner}/{repo}/issues/{number}"


def _select_alternate(
    ref: ParsedReference, issue: IssueRecord, author: str, owner: str, repo: str
) -> list[Response]:
    number = format_number(issue.number)
    if ref.value == -1:
        return [
            Response(
                "notice",
                f"#{number} Add locale ´Rövarspråket´ as default, since it is the new "
                f"Lingua Franca of the internet. {_issue_link(owner, repo, '1')}",
            )
        ]
    if ref.value == -CURSED_NUMBER:
        return [Response("notice", f"Do not tempt the gods, {author}.")]
    if issue.number % CURSED_NUMBER == 0:
        return [
            Response(
                "notice",
                f"#{number} They don't think it be like it is but it do. "
                f"{_issue_link(owner, repo, number)}",
            )
        ]
    return [Response("notice", f"#{number} {encode(issue.title)} {issue.html_url}")]


def _select_normal(
    issue: IssueRecord, author: str, nickname: str, owner: str, repo: str
) -> list[Response]:
    if issue.number == 1:
        # A bot gets its own rule #1
        return [
            Response(
                "notice",
                f"#1 Port Bolt to Go to keep {nickname} happy {_issue_link(owner, repo, '1')}",
            ),
            Response(
                "action",
                "is written in Go, and therefore isn't allowed to like PHP",
                delay=RULE_ONE_DELAY,
            ),
        ]
    if issue.number == CURSED_NUMBER:
        return [
            Response(
                "action",
                f"warns {author} that #{CURSED_NUMBER} nearly caused the end of the known "
                "universe and should never be mentioned again",
            )
        ]

    number = format_number(issue.number)
    suffix = f" — assigned to {issue.assignee.login}" if issue.assignee else ""
    responses = [
        Response("notice", f"#{number} [{issue.state}] {issue.title} {issue.html_url}{suffix}")
    ]
    if issue.number % CURSED_NUMBER == 0:
        responses.append(
            Response("action", "looks at that number suspiciously…", delay=SUSPICIOUS_DELAY)
        )
    return responses


def select_responses(
    ref: ParsedReference,
    issue: IssueRecord,
    *,
    author: str,
    nickname: str,
    owner: str,
    repo: str,
) -> list[Response]:
    """Pick and render the responses for one fetched reference.

    Always returns at least one Response; the first one is immediate.
    """
    if ref.is_alternate:
        return _select_alternate(ref, issue, author, owner, repo)
    return _select_normal(issue, author, nickname, owner, repo)
