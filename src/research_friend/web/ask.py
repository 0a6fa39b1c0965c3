"""Ask the model about the content of a URL."""

from typing import Any, Optional

from research_friend.ask import process_ask
from research_friend.cache import ContentCache
from research_friend.config import AskOptions
from research_friend.errors import MissingCapabilityError
from research_friend.protocols import ContentSource, ModelClient
from research_friend.web.content import load_url_content, utc_timestamp


def document_type_for(content_type: str) -> str:
    return "PDF document" if content_type == "pdf" else "web page"


async def ask_web(
    url: str,
    ask: str,
    source: ContentSource,
    model_client: Optional[ModelClient],
    cache: Optional[ContentCache] = None,
    options: AskOptions = AskOptions(),
) -> dict[str, Any]:
    """Fetch ``url`` (PDF or page) and answer ``ask`` about it.

    Raises:
        MissingCapabilityError: If no model client is available
    """
    if model_client is None:
        raise MissingCapabilityError("Model sampling is required for ask mode")

    content = await load_url_content(url, source, cache)
    result = await process_ask(
        content.text,
        ask,
        model_client,
        options=options,
        document_type=document_type_for(content.content_type),
    )
    return {
        "url": url,
        "content_type": content.content_type,
        "title": content.metadata.get("title"),
        "total_chars": len(content.text),
        "ask": ask,
        "answer": result.answer,
        "model": result.model,
        "chunks_processed": result.chunks_processed,
        "fetched_at": utc_timestamp(),
    }
