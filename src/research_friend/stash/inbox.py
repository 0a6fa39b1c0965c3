"""Inbox processing: extract, classify and file new documents."""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Iterator

from research_friend.config import ClassificationOptions
from research_friend.protocols import ModelClient
from research_friend.stash.classify import classify_document
from research_friend.stash.extractors import PLAINTEXT_TYPES, detect_file_type, extract_text
from research_friend.stash.paths import build_store_path, ensure_stash_dirs, get_inbox_path, get_store_root
from research_friend.storage import StashStore

logger = logging.getLogger(__name__)

TextExtractor = Callable[[Path, str], str]


def iter_inbox_files(inbox: Path) -> Iterator[Path]:
    """Regular, non-hidden files directly inside the inbox, by name."""
    for path in sorted(inbox.iterdir()):
        if path.name.startswith(".") or not path.is_file():
            continue
        yield path


async def process_inbox(
    store: StashStore,
    stash_root: Path,
    model_client: ModelClient,
    options: ClassificationOptions = ClassificationOptions(),
    extractor: TextExtractor = extract_text,
) -> dict[str, Any]:
    """File every supported document waiting in the inbox.

    Each file is extracted, classified, moved to
    ``store/<primary-topic>/`` and recorded in the catalog. Failures are
    collected per file and never stop the batch.

    Args:
        store: Stash catalog
        stash_root: Root directory of the stash
        model_client: Model-call capability used for classification
        options: Classification sampling budget and model limits
        extractor: Text extraction function (path, file type) -> text

    Returns:
        Dict with ``processed`` filenames, ``errors`` ({filename, error})
        and the catalog ``documents`` created
    """
    stash_root = Path(stash_root)
    ensure_stash_dirs(stash_root)
    store_root = get_store_root(stash_root)

    processed: list[str] = []
    errors: list[dict[str, str]] = []
    documents: list[dict] = []

    for file_path in iter_inbox_files(get_inbox_path(stash_root)):
        filename = file_path.name
        file_type = detect_file_type(filename)
        if file_type is None:
            errors.append({"filename": filename, "error": "Unsupported file type"})
            continue

        try:
            text = await asyncio.to_thread(extractor, file_path, file_type)
            classification = await classify_document(
                filename, text, store.get_topics_with_counts(), model_client, options
            )

            store_path = build_store_path(classification.primary_topic, filename)
            topic_dir = store_root / classification.primary_topic
            if (topic_dir / filename).exists() or store.get_document_by_store_path(store_path):
                raise FileExistsError(
                    f"A document named {filename} is already stored under "
                    f"{classification.primary_topic}"
                )

            for topic in classification.new_topics:
                store.get_or_create_topic(topic["name"], topic["description"])

            topic_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(file_path), str(topic_dir / filename))

            # Plaintext files are searched directly; others get a .txt sibling
            if file_type not in PLAINTEXT_TYPES:
                (topic_dir / f"{filename}.txt").write_text(text, encoding="utf-8")

            doc_id = store.insert_document(
                filename=filename,
                file_type=file_type,
                summary=classification.summary,
                store_path=store_path,
                char_count=len(text),
                primary_topic=classification.primary_topic,
                secondary_topics=classification.secondary_topics,
            )
        except Exception as e:
            logger.warning(f"Inbox: failed to process {filename}: {e}")
            errors.append({"filename": filename, "error": str(e)})
            continue

        logger.info(f"Inbox: filed {filename} under {classification.primary_topic}")
        processed.append(filename)
        documents.append(store.get_document(doc_id))

    return {"processed": processed, "errors": errors, "documents": documents}
