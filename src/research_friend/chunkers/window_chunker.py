"""Fixed-window chunking for documents too large for one model call."""

import math

from research_friend.errors import ChunkingError
from research_friend.models import Chunk

# Rough approximation: ~4 characters per token for English text.
# Not tokenizer-accurate; it keeps size checks and chunk boundaries deterministic.
CHARS_PER_TOKEN = 4

DEFAULT_OVERLAP_CHARS = 500


def estimate_tokens(text: str, chars_per_token: int = CHARS_PER_TOKEN) -> int:
    """Estimate the token count of ``text`` by character length."""
    return math.ceil(len(text) / chars_per_token)


def chunk_size_chars(
    usable_tokens: int,
    overhead_tokens: int,
    chars_per_token: int = CHARS_PER_TOKEN,
) -> int:
    """Characters of document text that fit in one call after prompt overhead."""
    return (usable_tokens - overhead_tokens) * chars_per_token


def compute_chunks(
    text: str,
    usable_tokens: int,
    overhead_tokens: int,
    overlap: int = DEFAULT_OVERLAP_CHARS,
    chars_per_token: int = CHARS_PER_TOKEN,
) -> list[Chunk]:
    """Split text into overlapping fixed-size windows.

    Every chunk is ``(usable_tokens - overhead_tokens) * chars_per_token``
    characters long except the last, which ends at the end of the text.
    Consecutive chunks share ``overlap`` characters so content near a cut
    is seen whole by at least one chunk.

    Args:
        text: Full document text
        usable_tokens: Input token budget of one model call
        overhead_tokens: Tokens reserved for system prompt and framing
        overlap: Characters shared by neighbouring chunks
        chars_per_token: Characters-per-token approximation

    Returns:
        Chunks in document order, covering the whole text

    Raises:
        ChunkingError: If the budget leaves no room for text, or the overlap
            is at least as large as a chunk
    """
    size = chunk_size_chars(usable_tokens, overhead_tokens, chars_per_token)
    if size <= 0:
        raise ChunkingError(
            f"Chunk size must be positive (usable tokens {usable_tokens}, "
            f"overhead tokens {overhead_tokens})"
        )

    step = size - overlap
    if step <= 0:
        raise ChunkingError(
            f"Chunk overlap ({overlap} chars) must be smaller than chunk size ({size} chars)"
        )

    spans = [(start, min(start + size, len(text))) for start in range(0, len(text), step)]
    total = len(spans)

    return [
        Chunk(
            text=text[start:end],
            ordinal=idx,
            total=total,
            start_char=start,
            end_char=end,
        )
        for idx, (start, end) in enumerate(spans, 1)
    ]
