"""Plain-text helpers shared by the web and stash extractors."""

from typing import Any


def truncate(value: str, max_chars: int) -> tuple[str, bool]:
    """Cut ``value`` to ``max_chars`` and report whether anything was dropped."""
    if len(value) <= max_chars:
        return value, False
    return value[:max_chars], True


def search_text(text: str, query: str, context_chars: int = 200) -> list[dict[str, Any]]:
    """Find case-insensitive occurrences of ``query`` with surrounding context.

    Args:
        text: Text to search
        query: Literal phrase to look for
        context_chars: Characters to include on each side of a match

    Returns:
        One dict per non-overlapping match with position, context and
        ellipsis markers for clipped ends
    """
    if not query:
        return []

    matches = []
    lower_text = text.lower()
    lower_query = query.lower()
    pos = lower_text.find(lower_query)

    while pos != -1:
        start = max(0, pos - context_chars)
        end = min(len(text), pos + len(query) + context_chars)
        matches.append(
            {
                "position": pos,
                "context": text[start:end],
                "prefix": "..." if start > 0 else "",
                "suffix": "..." if end < len(text) else "",
            }
        )
        pos = lower_text.find(lower_query, pos + len(query))

    return matches


def line_to_offset(text: str, line_number: int) -> int:
    """Convert a 1-based line number to a character offset.

    Line numbers past the end of the text map to ``len(text)``.
    """
    if line_number <= 1:
        return 0

    offset = 0
    for _ in range(line_number - 1):
        newline = text.find("\n", offset)
        if newline == -1:
            return len(text)
        offset = newline + 1
    return offset
