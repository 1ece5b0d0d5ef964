"""
Processing module for splitting study content into generation-sized chunks.
"""

from .chunker import (
    Chunk,
    SourceChunker,
    chunk_text,
)

__all__ = [
    "Chunk",
    "SourceChunker",
    "chunk_text",
]
