"""Data models for stash search."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class LineMatch:
    """A matching region anchored at a 1-based line number."""

    line: int
    text: str


@dataclass
class FileMatches:
    """Content matches found in one stored file."""

    store_path: str
    matches: list[LineMatch] = field(default_factory=list)


@dataclass
class SearchHit:
    """One document in a search result."""

    document: dict[str, Any]
    match_type: str  # "content", "filename" or "filename+content"
    matches: list[LineMatch] = field(default_factory=list)

    @property
    def has_filename_match(self) -> bool:
        return "filename" in self.match_type

    def to_dict(self) -> dict[str, Any]:
        doc = self.document
        return {
            "id": doc["id"],
            "filename": doc["filename"],
            "file_type": doc["file_type"],
            "summary": doc.get("summary"),
            "char_count": doc.get("char_count"),
            "created_at": doc.get("created_at"),
            "match_type": self.match_type,
            "matches": [{"line": m.line, "context": m.text} for m in self.matches],
        }
