"""Read, search and question individual stashed documents."""

import logging
from pathlib import Path
from typing import Any, Optional

from research_friend.ask import process_ask
from research_friend.config import AskOptions
from research_friend.errors import DocumentNotFoundError
from research_friend.protocols import ModelClient
from research_friend.stash.paths import get_text_path
from research_friend.storage import StashStore
from research_friend.utils import line_to_offset, search_text, truncate

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 40000


def _load_document(store: StashStore, stash_root: Path, doc_id: int) -> tuple[dict, str]:
    doc = store.get_document(doc_id)
    if doc is None:
        raise DocumentNotFoundError(f"Document not found: {doc_id}")
    full_text = get_text_path(doc, Path(stash_root)).read_text(encoding="utf-8")
    return doc, full_text


def _header(doc: dict, full_text: str) -> dict[str, Any]:
    return {
        "id": doc["id"],
        "filename": doc["filename"],
        "file_type": doc["file_type"],
        "summary": doc["summary"],
        "total_chars": len(full_text),
    }


def extract_from_stash(
    store: StashStore,
    stash_root: Path,
    doc_id: int,
    max_chars: int = DEFAULT_MAX_CHARS,
    offset: Optional[int] = None,
    line: Optional[int] = None,
) -> dict[str, Any]:
    """Return a page of a stashed document's text.

    Args:
        store: Stash catalog
        stash_root: Root directory of the stash
        doc_id: Document id
        max_chars: Page size in characters
        offset: Character offset to start from
        line: 1-based line to start from (exclusive with ``offset``)

    Raises:
        ValueError: If both ``offset`` and ``line`` are given
        DocumentNotFoundError: If no document has ``doc_id``
    """
    if offset and line is not None:
        raise ValueError("Cannot specify both 'offset' and 'line'")

    doc, full_text = _load_document(store, stash_root, doc_id)

    start = 0
    if line is not None:
        start = line_to_offset(full_text, line)
    elif offset is not None:
        start = offset

    content, truncated = truncate(full_text[start:], max_chars)
    result = _header(doc, full_text)
    result.update({"content": content, "truncated": truncated, "offset": start})
    if line is not None:
        result["line"] = line
    return result


def search_in_stash_document(
    store: StashStore,
    stash_root: Path,
    doc_id: int,
    query: str,
    context_chars: int = 200,
) -> dict[str, Any]:
    """Find phrase occurrences inside one stashed document."""
    doc, full_text = _load_document(store, stash_root, doc_id)
    matches = search_text(full_text, query, context_chars)
    result = _header(doc, full_text)
    result.update({"search": query, "match_count": len(matches), "matches": matches})
    return result


async def ask_stash_document(
    store: StashStore,
    stash_root: Path,
    doc_id: int,
    ask: str,
    model_client: Optional[ModelClient],
    options: AskOptions = AskOptions(),
) -> dict[str, Any]:
    """Answer a question about a stashed document with the model."""
    doc, full_text = _load_document(store, stash_root, doc_id)
    logger.info(f"Ask on stashed document {doc_id} ({doc['filename']})")
    result = await process_ask(
        full_text, ask, model_client, options=options, document_type="document"
    )
    response = _header(doc, full_text)
    response.update(
        {
            "ask": ask,
            "answer": result.answer,
            "model": result.model,
            "chunks_processed": result.chunks_processed,
        }
    )
    return response
