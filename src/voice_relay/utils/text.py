"""Text normalization applied before synthesis."""

from __future__ import annotations

import unicodedata

# Letters, numbers, punctuation and separators (space, line, paragraph)
_KEPT_CATEGORIES = frozenset("LNPZ")


def sanitize_text(text: str | None) -> str:
    """Strip characters a TTS engine cannot speak.

    Parameters
    ----------
    text:
        Raw client text (may be None or empty).

    Returns
    -------
    str
        ``text`` with control characters, symbols and emoji removed and
        surrounding whitespace trimmed. Newlines are kept because they mark
        paragraph boundaries for chunking.
    """

    if not text:
        return ""

    kept = [
        char
        for char in text
        if char == "\n" or unicodedata.category(char)[0] in _KEPT_CATEGORIES
    ]
    return "".join(kept).strip()


__all__ = ["sanitize_text"]
