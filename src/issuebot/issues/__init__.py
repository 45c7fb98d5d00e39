"""Issue reference pipeline: extract, fetch, render."""

from issuebot.issues.handler import IssueReferenceHandler
from issuebot.issues.references import (
    ParsedReference,
    ReferenceMatch,
    extract_references,
    parse_reference,
)
from issuebot.issues.responses import Response, select_responses
from issuebot.issues.tracker import Assignee, IssueRecord, TrackerClient

__all__ = [
    "Assignee",
    "IssueRecord",
    "IssueReferenceHandler",
    "ParsedReference",
    "ReferenceMatch",
    "Response",
    "TrackerClient",
    "extract_references",
    "parse_reference",
    "select_responses",
]
