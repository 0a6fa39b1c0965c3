"""PDF-only reading: pagination, phrase search or a model question."""

from typing import Any, Optional

from research_friend.ask import process_ask
from research_friend.cache import ContentCache
from research_friend.config import AskOptions
from research_friend.errors import MissingCapabilityError
from research_friend.protocols import ContentSource, ModelClient
from research_friend.web.content import load_url_content, utc_timestamp
from research_friend.web.extract import (
    DEFAULT_CONTEXT_CHARS,
    DEFAULT_MAX_CHARS,
    describe_content,
    page_or_search,
)


async def fetch_pdf(
    url: str,
    source: ContentSource,
    cache: Optional[ContentCache] = None,
    max_chars: int = DEFAULT_MAX_CHARS,
    offset: int = 0,
    search: Optional[str] = None,
    ask: Optional[str] = None,
    model_client: Optional[ModelClient] = None,
    options: AskOptions = AskOptions(),
    context_chars: int = DEFAULT_CONTEXT_CHARS,
) -> dict[str, Any]:
    """Read a PDF from ``url``.

    ``ask`` takes precedence over ``search``, which takes precedence over
    plain pagination.

    Raises:
        MissingCapabilityError: If ``ask`` is given without a model client
    """
    if ask and model_client is None:
        raise MissingCapabilityError("Model sampling is required for 'ask' mode")

    content = await load_url_content(url, source, cache, pdf_only=True)

    if not ask:
        return page_or_search(url, content, max_chars, offset, search, context_chars)

    answer = await process_ask(
        content.text, ask, model_client, options=options, document_type="PDF document"
    )
    result = describe_content(url, content)
    result.update(
        {
            "ask": ask,
            "answer": answer.answer,
            "model": answer.model,
            "chunks_processed": answer.chunks_processed,
            "fetched_at": utc_timestamp(),
        }
    )
    return result
