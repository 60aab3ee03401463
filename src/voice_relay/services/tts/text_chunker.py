"""
Text Chunker for Provider-Limited TTS Requests.

Providers cap the number of characters accepted per synthesis call, so long
input is split into ordered chunks before dispatch. Split points prefer
natural speech boundaries:

    1. the closest sentence/paragraph break ('. ', '! ', '? ', newline)
       inside the window, keeping the punctuation with the left chunk;
    2. otherwise the closest space inside the window;
    3. otherwise a hard cut at the limit (may split a word).

Usage:
    chunks = chunk_text(text, max_length=200)
    for chunk in chunks:
        audio = await fetch(chunk.content)

The chunker is a pure function of its input. No chunk is ever longer than
``max_length`` and the untrimmed pieces are contiguous slices of the input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

from .errors import ChunkingError

# Two-character delimiters whose first character ends the chunk
SENTENCE_DELIMITERS = (". ", "! ", "? ")
PARAGRAPH_DELIMITER = "\n"


@dataclass(frozen=True)
class TextChunk:
    """A bounded slice of input text, in dispatch order."""

    index: int
    content: str

    def __len__(self) -> int:
        return len(self.content)


def _find_sentence_break(text: str, start: int, end: int) -> int | None:
    """Return the cut offset just after the last sentence break in the window."""
    best = -1
    for delimiter in SENTENCE_DELIMITERS:
        # The delimiter must fit entirely inside text[start:end + 1]
        best = max(best, text.rfind(delimiter, start + 1, end + 1))
    best = max(best, text.rfind(PARAGRAPH_DELIMITER, start + 1, end))
    if best > start:
        return best + 1
    return None


def _find_word_break(text: str, start: int, end: int) -> int | None:
    """Return the offset of the last space in the window."""
    position = text.rfind(" ", start + 1, end + 1)
    if position > start:
        return position
    return None


def iter_chunks(text: str, max_length: int) -> Iterator[TextChunk]:
    """
    Lazily split ``text`` into chunks of at most ``max_length`` characters.

    Args:
        text: Text to split.
        max_length: Provider per-call character limit, must be positive.

    Yields:
        TextChunk values with consecutive indexes starting at 0.

    Raises:
        ChunkingError: If ``max_length`` is not a positive integer.
    """
    if not isinstance(max_length, int) or max_length <= 0:
        raise ChunkingError(f"max_length must be a positive integer, got {max_length!r}")

    if not text.strip():
        yield TextChunk(index=0, content="")
        return

    length = len(text)
    start = 0
    index = 0
    while start < length:
        end = start + max_length
        if end >= length:
            cut = length
        else:
            cut = _find_sentence_break(text, start, end)
            if cut is None:
                cut = _find_word_break(text, start, end)
            if cut is None:
                cut = end

        yield TextChunk(index=index, content=text[start:cut].strip())
        index += 1
        start = cut


def chunk_text(text: str, max_length: int) -> List[TextChunk]:
    """Split ``text`` into an ordered list of provider-sized chunks."""
    return list(iter_chunks(text, max_length))


__all__ = ["TextChunk", "chunk_text", "iter_chunks"]
