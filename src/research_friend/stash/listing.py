"""Browse the stash catalog, optionally by topic."""

from typing import Any, Optional

from research_friend.storage import StashStore


def _summarize_topics(store: StashStore) -> list[dict[str, Any]]:
    return [
        {"name": t["name"], "description": t["description"], "doc_count": t["doc_count"]}
        for t in store.get_topics_with_counts()
    ]


def _document_entry(doc: dict[str, Any]) -> dict[str, Any]:
    entry = {
        "id": doc["id"],
        "filename": doc["filename"],
        "file_type": doc["file_type"],
        "summary": doc["summary"],
        "char_count": doc["char_count"],
        "created_at": doc["created_at"],
    }
    if "is_primary" in doc:
        entry["is_primary"] = bool(doc["is_primary"])
    return entry


def list_stash(
    store: StashStore,
    topic: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> dict[str, Any]:
    """List stashed documents, newest first.

    Without a topic every document is listed (``type`` is ``"all"`` and
    ``total_documents`` is reported); with one, only documents filed under
    it (``type`` is ``"topic"``, each entry carries ``is_primary``). The
    topic summary is always included.
    """
    topics = _summarize_topics(store)

    if not topic:
        all_docs = store.get_all_documents()
        paged = all_docs[offset : offset + limit]
        return {
            "type": "all",
            "total_documents": len(all_docs),
            "count": len(paged),
            "offset": offset,
            "limit": limit,
            "topics": topics,
            "documents": [_document_entry(d) for d in paged],
        }

    documents = store.get_documents_by_topic(topic, limit, offset)
    return {
        "type": "topic",
        "topic": topic,
        "count": len(documents),
        "offset": offset,
        "limit": limit,
        "topics": topics,
        "documents": [_document_entry(d) for d in documents],
    }
