"""Data models for model calls and their results."""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class TextBlock:
    """A text content block in a model reply."""

    text: str
    type: str = "text"


# A reply body is either plain text, one block, or a list of blocks.
# Blocks may also be MCP content objects or mappings with type/text keys.
ReplyContent = Union[str, TextBlock, list, Any]


@dataclass(frozen=True)
class ModelReply:
    """Raw reply from one model call."""

    content: ReplyContent
    model: str


@dataclass(frozen=True)
class Answer:
    """Plain-text answer extracted from a single model call."""

    text: str
    model: str


@dataclass(frozen=True)
class AskResult:
    """Final result of an ask invocation."""

    answer: str
    model: str
    chunks_processed: int


@dataclass
class Classification:
    """Topic classification returned by the model for one document."""

    summary: str
    primary_topic: str
    secondary_topics: list[str] = field(default_factory=list)
    new_topics: list[dict[str, str]] = field(default_factory=list)
