"""Chunking strategies."""

from research_friend.chunkers.window_chunker import (
    CHARS_PER_TOKEN,
    compute_chunks,
    estimate_tokens,
)

__all__ = ["CHARS_PER_TOKEN", "compute_chunks", "estimate_tokens"]
