"""Core data models for document text, chunks and cached content."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Chunk:
    """A contiguous, overlapping slice of a larger document.

    ``ordinal`` is 1-based; ``total`` is the number of chunks the document
    was split into.
    """

    text: str
    ordinal: int
    total: int
    start_char: int
    end_char: int


@dataclass(frozen=True)
class SampleSegment:
    """A labelled excerpt picked for topic classification."""

    label: str  # start, early, middle, end or random
    offset: int
    text: str

    def render(self) -> str:
        return f"\n[Sample {self.label} @{self.offset}]\n{self.text}"


@dataclass
class FetchedContent:
    """Extracted text of one URL plus what we know about it."""

    text: str
    content_type: str  # "pdf" or "html"
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CacheEntry:
    """A cached document body keyed by its source."""

    content: str
    metadata: dict[str, Any]
    size: int
    content_type: str
    fetched_at: datetime


@dataclass(frozen=True)
class CacheStats:
    entry_count: int
    total_bytes: int
