"""Merge filename and content matches into one result per document."""

from typing import Any, Iterable

from research_friend.models import LineMatch, SearchHit

MATCH_CONTENT = "content"
MATCH_FILENAME = "filename"
MATCH_BOTH = "filename+content"

DEFAULT_MAX_MATCHES_PER_DOC = 50


def aggregate_search_results(
    content_matches: Iterable[tuple[dict[str, Any], list[LineMatch]]],
    filename_matches: Iterable[dict[str, Any]],
    max_matches_per_doc: int = DEFAULT_MAX_MATCHES_PER_DOC,
) -> list[SearchHit]:
    """Combine content and filename matches, deduplicated by document id.

    Args:
        content_matches: (document, line matches) pairs
        filename_matches: Documents whose filename matched
        max_matches_per_doc: Keep at most this many content matches per
            document, earliest lines first

    Returns:
        Hits with any filename component first; insertion order otherwise
    """
    hits: dict[Any, SearchHit] = {}

    for document, matches in content_matches:
        ordered = sorted(matches, key=lambda m: m.line)[:max_matches_per_doc]
        existing = hits.get(document["id"])
        if existing is not None:
            merged = sorted(existing.matches + ordered, key=lambda m: m.line)
            existing.matches = merged[:max_matches_per_doc]
            continue
        hits[document["id"]] = SearchHit(document=document, match_type=MATCH_CONTENT, matches=ordered)

    for document in filename_matches:
        existing = hits.get(document["id"])
        if existing is None:
            hits[document["id"]] = SearchHit(document=document, match_type=MATCH_FILENAME)
        elif existing.match_type == MATCH_CONTENT:
            existing.match_type = MATCH_BOTH

    # sorted() is stable, so each group keeps insertion order
    return sorted(hits.values(), key=lambda hit: 0 if hit.has_filename_match else 1)
