"""
Sentence-Aware Chunker for Study Content.

Splits long pasted notes, extracted document text or transcripts into
bounded windows so each generation call sees a focused slice of the source
instead of the whole document.

Key Features:
1. Windows never exceed ``max_chars`` characters
2. A window that would cut mid-text is pulled back to the last sentence
   terminator, provided that terminator sits in the final 40% of the window
3. Chunks never overlap and concatenate back to the original text exactly
4. Each chunk carries its character length as the weight used for quota allocation
"""
from __future__ import annotations

import math
from dataclasses import dataclass

SENTENCE_TERMINATOR = "."
DEFAULT_MAX_CHARS = 12000
DEFAULT_CUT_RATIO = 0.6


@dataclass(frozen=True)
class Chunk:
    """
    A bounded, sentence-aligned slice of the source text.

    Attributes:
        text: The slice itself
        start_offset: Character offset of the slice in the source text
        weight: Character length, used for proportional quota allocation
    """
    text: str
    start_offset: int
    weight: int

    @property
    def end_offset(self) -> int:
        return self.start_offset + len(self.text)


class SourceChunker:
    """
    Splits raw study text into sentence-aligned chunks.

    Example:
        >>> chunker = SourceChunker(max_chars=20)
        >>> [c.text for c in chunker.chunk("One two three. Four five six seven.")]
        ['One two three.', ' Four five six seven', '.']
    """

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS, cut_ratio: float = DEFAULT_CUT_RATIO):
        """
        Initialize the chunker.

        Args:
            max_chars: Maximum characters per chunk
            cut_ratio: Fraction of the window a sentence break must lie beyond
                to be used instead of the raw window edge
        """
        if max_chars <= 0:
            raise ValueError(f"max_chars must be positive, got {max_chars}")
        if not 0.0 <= cut_ratio <= 1.0:
            raise ValueError(f"cut_ratio must be within [0, 1], got {cut_ratio}")
        self.max_chars = max_chars
        self.cut_ratio = cut_ratio

    def chunk(self, text: str) -> list[Chunk]:
        """Split text into chunks ordered by position in the source."""
        chunks: list[Chunk] = []
        start = 0
        length = len(text)

        while start < length:
            end = min(start + self.max_chars, length)
            cut = end

            if end < length:
                earliest = start + math.ceil(self.max_chars * self.cut_ratio)
                period = text.rfind(SENTENCE_TERMINATOR, earliest, end)
                if period != -1:
                    cut = period + 1

            chunks.append(Chunk(text=text[start:cut], start_offset=start, weight=cut - start))
            start = cut

        return chunks


def chunk_text(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> list[Chunk]:
    """Convenience wrapper around SourceChunker with the default cut ratio."""
    return SourceChunker(max_chars=max_chars).chunk(text)
