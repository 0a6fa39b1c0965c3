"""Re-classify stashed documents and move them to their new topics."""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from research_friend.config import ClassificationOptions
from research_friend.errors import DocumentNotFoundError
from research_friend.protocols import ModelClient
from research_friend.stash.classify import classify_document
from research_friend.stash.extractors import PLAINTEXT_TYPES, extract_text
from research_friend.stash.inbox import TextExtractor
from research_friend.stash.paths import build_store_path, get_absolute_store_path, get_text_path
from research_friend.storage import StashStore

logger = logging.getLogger(__name__)


async def _reindex_one(
    doc_id: int,
    store: StashStore,
    stash_root: Path,
    model_client: ModelClient,
    options: ClassificationOptions,
    extractor: TextExtractor,
) -> None:
    doc = store.get_document(doc_id)
    if doc is None:
        raise DocumentNotFoundError(f"Document not found: {doc_id}")

    text_path = get_text_path(doc, stash_root)
    regenerated = False
    try:
        full_text = text_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if doc["file_type"] in PLAINTEXT_TYPES:
            raise
        original = get_absolute_store_path(stash_root, doc["store_path"])
        full_text = await asyncio.to_thread(extractor, original, doc["file_type"])
        regenerated = True

    classification = await classify_document(
        doc["filename"], full_text, store.get_topics_with_counts(), model_client, options
    )

    new_store_path = build_store_path(classification.primary_topic, doc["filename"])
    old_path = get_absolute_store_path(stash_root, doc["store_path"])
    new_path = get_absolute_store_path(stash_root, new_store_path)
    if old_path != new_path:
        occupant = store.get_document_by_store_path(new_store_path)
        if new_path.exists() or (occupant and occupant["id"] != doc_id):
            raise FileExistsError(
                f"A document named {doc['filename']} is already stored under "
                f"{classification.primary_topic}"
            )

    for topic in classification.new_topics:
        store.get_or_create_topic(topic["name"], topic["description"])

    new_path.parent.mkdir(parents=True, exist_ok=True)

    if old_path != new_path and old_path.exists():
        shutil.move(str(old_path), str(new_path))

    if doc["file_type"] not in PLAINTEXT_TYPES:
        old_text = get_absolute_store_path(stash_root, f"{doc['store_path']}.txt")
        new_text = get_absolute_store_path(stash_root, f"{new_store_path}.txt")
        if old_text != new_text and old_text.exists():
            shutil.move(str(old_text), str(new_text))
        elif regenerated or not new_text.exists():
            new_text.write_text(full_text, encoding="utf-8")

    store.update_document(
        doc_id,
        summary=classification.summary,
        store_path=new_store_path,
        char_count=len(full_text),
        primary_topic=classification.primary_topic,
        secondary_topics=classification.secondary_topics,
    )
    logger.info(f"Reindex: {doc['filename']} -> {classification.primary_topic}")


async def reindex_stash(
    store: StashStore,
    stash_root: Path,
    model_client: ModelClient,
    ids: Optional[list[int]] = None,
    options: ClassificationOptions = ClassificationOptions(),
    extractor: TextExtractor = extract_text,
) -> dict[str, Any]:
    """Re-run classification for the given documents (all when ``ids`` is empty).

    Missing extracted text is regenerated from the original file. Failures
    are collected per document.

    Returns:
        Dict with ``reindexed`` ids, ``errors`` ({id, error}) and the
        updated ``documents``
    """
    stash_root = Path(stash_root)
    target_ids = list(ids) if ids else [doc["id"] for doc in store.get_all_documents()]

    reindexed: list[int] = []
    errors: list[dict[str, Any]] = []
    documents: list[dict] = []

    for doc_id in target_ids:
        try:
            await _reindex_one(doc_id, store, stash_root, model_client, options, extractor)
        except Exception as e:
            logger.warning(f"Reindex: failed for document {doc_id}: {e}")
            errors.append({"id": doc_id, "error": str(e)})
            continue
        reindexed.append(doc_id)
        documents.append(store.get_document(doc_id))

    return {"reindexed": reindexed, "errors": errors, "documents": documents}
