"""Rövarspråket encoder: every consonant is doubled with an "o" in between."""

from __future__ import annotations

CONSONANTS = frozenset("BCDGFHJKLMNPQRSTVWXZbcdfghjklmnpqrstvwxz")


def encode(text: str) -> str:
    """Encode text in Rövarspråket.

    Each consonant is followed by ``o`` and a lower-cased copy of itself;
    everything else passes through unchanged.

    >>> encode("Go")
    'Gogo'
    """
    out: list[str] = []
    for ch in text:
        out.append(ch)
        if ch in CONSONANTS:
            out.append("o")
            out.append(ch.lower())
    return "".join(out)
