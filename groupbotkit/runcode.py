"""Output shaping for the online code runner."""

from __future__ import annotations

TRUNCATION_SUFFIX = "\n............\n............"
_MAX_LINES = 30
_MAX_CHARS = 1000


def cut_too_long(text: str) -> str:
    """Cut output with more than 30 lines or 1000 characters.

    A ``\\r\\n`` pair counts as one line break.
    """
    count = 0
    last = len(text) - 1
    for i, ch in enumerate(text):
        if ch == "\r" and i < last and text[i + 1] == "\n":
            pass
        elif ch in "\n\r":
            count += 1
        if count > _MAX_LINES or i > _MAX_CHARS:
            return text[: i - 1] + TRUNCATION_SUFFIX
    return text