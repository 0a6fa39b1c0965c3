"""Representative sampling of long documents for topic classification."""

import math
import random
from typing import Callable

from research_friend.models import SampleSegment

MAX_CLASSIFICATION_CHARS = 50_000
SAMPLE_CHUNKS = 5

MIN_SAMPLE_CHUNKS = 3
MAX_SAMPLE_CHUNKS = 8
MIN_CHUNK_SIZE = 200
MAX_NUDGE_ATTEMPTS = 10


def select_sample_segments(
    text: str,
    max_chars: int = MAX_CLASSIFICATION_CHARS,
    chunk_count: int = SAMPLE_CHUNKS,
    rng: Callable[[], float] = random.random,
) -> list[SampleSegment]:
    """Pick labelled excerpts from start, early, middle, end and random spots.

    Candidates are placed in that priority order. A candidate closer than
    half a chunk to an already chosen offset is nudged forward by one chunk,
    up to ten times; after that it is kept where it is, so near-duplicates
    are possible in crowded texts.

    Args:
        text: Text longer than ``max_chars``
        max_chars: Character budget for the whole sample
        chunk_count: Desired number of excerpts, clamped to 3..8
        rng: Source of floats in [0, 1) for the random excerpts

    Returns:
        Segments sorted by offset
    """
    count = max(MIN_SAMPLE_CHUNKS, min(chunk_count, MAX_SAMPLE_CHUNKS))
    chunk_size = max(MIN_CHUNK_SIZE, max_chars // count)
    max_start = max(0, len(text) - chunk_size)
    mid_start = max(0, math.floor(len(text) / 2 - chunk_size / 2))
    early_start = min(chunk_size, max_start)

    chosen: list[tuple[int, str]] = []

    def push(position: int, label: str) -> None:
        pos = max(0, min(position, max_start))
        attempts = 0
        while (
            any(abs(existing - pos) < chunk_size / 2 for existing, _ in chosen)
            and attempts < MAX_NUDGE_ATTEMPTS
        ):
            pos = max(0, min(pos + chunk_size, max_start))
            attempts += 1
        chosen.append((pos, label))

    push(0, "start")
    push(early_start, "early")
    push(mid_start, "middle")
    push(max_start, "end")

    for _ in range(count - len(chosen)):
        push(math.floor(rng() * (max_start + 1)), "random")

    return [
        SampleSegment(label=label, offset=pos, text=text[pos : pos + chunk_size])
        for pos, label in sorted(chosen, key=lambda item: item[0])
    ]


def sample_text_for_classification(
    text: str,
    max_chars: int = MAX_CLASSIFICATION_CHARS,
    chunk_count: int = SAMPLE_CHUNKS,
    rng: Callable[[], float] = random.random,
) -> str:
    """Return ``text`` unchanged if it fits the budget, else a labelled sample."""
    if len(text) <= max_chars:
        return text

    segments = select_sample_segments(text, max_chars, chunk_count, rng)
    return "\n".join(segment.render() for segment in segments).strip()
