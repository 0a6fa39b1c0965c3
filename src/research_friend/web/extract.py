"""Paginated reading and phrase search over URL content."""

from typing import Any, Optional

from research_friend.cache import ContentCache
from research_friend.models import FetchedContent
from research_friend.protocols import ContentSource
from research_friend.utils import search_text, truncate
from research_friend.web.content import load_url_content, utc_timestamp

DEFAULT_MAX_CHARS = 40000
DEFAULT_CONTEXT_CHARS = 200

_PDF_FIELDS = ("title", "author", "creation_date", "page_count")


def describe_content(url: str, content: FetchedContent) -> dict[str, Any]:
    """Common result fields: source, type, size and document metadata."""
    result: dict[str, Any] = {
        "url": url,
        "content_type": content.content_type,
        "total_chars": len(content.text),
    }
    if content.content_type == "pdf":
        for key in _PDF_FIELDS:
            result[key] = content.metadata.get(key)
    else:
        result["title"] = content.metadata.get("title")
    return result


def page_or_search(
    url: str,
    content: FetchedContent,
    max_chars: int = DEFAULT_MAX_CHARS,
    offset: int = 0,
    search: Optional[str] = None,
    context_chars: int = DEFAULT_CONTEXT_CHARS,
) -> dict[str, Any]:
    """Either the phrase matches in ``content`` or one page of its text."""
    result = describe_content(url, content)

    if search:
        matches = search_text(content.text, search, context_chars)
        result.update({"search": search, "match_count": len(matches), "matches": matches})
    else:
        page, truncated = truncate(content.text[offset:], max_chars)
        result.update({"offset": offset, "content": page, "truncated": truncated})

    result["fetched_at"] = utc_timestamp()
    return result


async def extract_from_url(
    url: str,
    source: ContentSource,
    cache: Optional[ContentCache] = None,
    max_chars: int = DEFAULT_MAX_CHARS,
    offset: int = 0,
    search: Optional[str] = None,
    context_chars: int = DEFAULT_CONTEXT_CHARS,
) -> dict[str, Any]:
    """Extract content from a URL, auto-detecting PDF vs web page.

    Args:
        url: http(s) URL to read
        source: Fetches content on a cache miss
        cache: Shared content cache
        max_chars: Page size in characters
        offset: Character offset to start from
        search: Phrase to look for instead of paging
        context_chars: Context around each search match

    Returns:
        Paginated content or search matches plus document metadata
    """
    content = await load_url_content(url, source, cache)
    return page_or_search(url, content, max_chars, offset, search, context_chars)
