"""Issue reference extraction: ``#123`` and ``#-123`` tokens in chat text."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal

from issuebot.core.errors import MalformedReferenceError

REFERENCE_RE = re.compile(r"#(-?\d+)")


@dataclass(frozen=True)
class ReferenceMatch:
    """Captured digits of one reference, including the optional minus."""

    raw: str


@dataclass(frozen=True)
class ParsedReference:
    """A reference resolved to a lookup key plus its response flavour.

    ``is_alternate`` follows the sign bit, so ``#-0`` is alternate too.
    """

    value: float
    magnitude: str
    is_alternate: bool


def extract_references(text: str) -> Iterator[ReferenceMatch]:
    """Yield one ReferenceMatch per non-overlapping ``#<digits>`` token."""
    for m in REFERENCE_RE.finditer(text):
        yield ReferenceMatch(raw=m.group(1))


def format_number(value: float) -> str:
    """Shortest decimal rendering of value: no exponent, no trailing ``.0``."""
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def parse_reference(match: ReferenceMatch) -> ParsedReference:
    """Parse captured text into a ParsedReference.

    Raises MalformedReferenceError when the text is not a finite number.
    """
    try:
        value = float(match.raw)
    except ValueError as exc:
        raise MalformedReferenceError(
            f"not a number: {match.raw!r}",
            code="not_numeric",
            original_error=exc,
        ) from exc
    if not math.isfinite(value):
        raise MalformedReferenceError(
            f"reference out of range: {match.raw[:32]!r}",
            code="out_of_range",
        )
    return ParsedReference(
        value=value,
        magnitude=format_number(abs(value)),
        is_alternate=math.copysign(1.0, value) < 0,
    )
