"""Split outbound lines so each fits in one IRC message."""

from __future__ import annotations

# 512 bytes per IRC line, minus prefix, command, target and CRLF
MAX_LINE_BYTES = 400


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _hard_split(word: str, max_bytes: int) -> list[str]:
    """Split a single over-long word on character boundaries."""
    pieces: list[str] = []
    current = ""
    for ch in word:
        if current and _byte_len(current + ch) > max_bytes:
            pieces.append(current)
            current = ""
        current += ch
    if current:
        pieces.append(current)
    return pieces


def split_line(text: str, max_bytes: int = MAX_LINE_BYTES) -> list[str]:
    """Split text at spaces into chunks of at most max_bytes UTF-8 bytes.

    Words longer than max_bytes are cut between characters, never inside one.
    Newlines are treated as spaces since IRC lines cannot contain them.
    """
    text = text.replace("\r", " ").replace("\n", " ")
    if not text.strip():
        return []
    if _byte_len(text) <= max_bytes:
        return [text]

    chunks: list[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if _byte_len(candidate) <= max_bytes:
            current = candidate
            continue
        if current:
            chunks.append(current)
        if _byte_len(word) <= max_bytes:
            current = word
        else:
            *full, current = _hard_split(word, max_bytes)
            chunks.extend(full)
    if current:
        chunks.append(current)
    return chunks
