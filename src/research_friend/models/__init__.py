"""Data models for research-friend."""

from research_friend.models.document import (
    CacheEntry,
    CacheStats,
    Chunk,
    FetchedContent,
    SampleSegment,
)
from research_friend.models.llm import Answer, AskResult, Classification, ModelReply, TextBlock
from research_friend.models.search import FileMatches, LineMatch, SearchHit

__all__ = [
    "Answer",
    "AskResult",
    "CacheEntry",
    "CacheStats",
    "Chunk",
    "Classification",
    "FetchedContent",
    "FileMatches",
    "LineMatch",
    "ModelReply",
    "SampleSegment",
    "SearchHit",
    "TextBlock",
]
