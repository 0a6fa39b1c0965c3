"""Filesystem layout of a stash.

    <root>/stash.db
    <root>/inbox/<filename>
    <root>/store/<primary-topic>/<filename>[.txt]
"""

from pathlib import Path, PurePosixPath
from typing import Any

from research_friend.stash.extractors import PLAINTEXT_TYPES

INBOX_DIR = "inbox"
STORE_DIR = "store"


def get_inbox_path(stash_root: Path) -> Path:
    return Path(stash_root) / INBOX_DIR


def get_store_root(stash_root: Path) -> Path:
    return Path(stash_root) / STORE_DIR


def build_store_path(primary_topic: str, filename: str) -> str:
    """Catalog path (relative to the stash root, POSIX separators) of a stored file."""
    return str(PurePosixPath(STORE_DIR, primary_topic, filename))


def get_absolute_store_path(stash_root: Path, store_path: str) -> Path:
    return Path(stash_root) / store_path


def get_text_path(doc: dict[str, Any], stash_root: Path) -> Path:
    """Searchable text file of a document.

    Plaintext documents are their own text; extracted types keep a
    ``.txt`` sibling next to the original.
    """
    if doc["file_type"] in PLAINTEXT_TYPES:
        return get_absolute_store_path(stash_root, doc["store_path"])
    return get_absolute_store_path(stash_root, f"{doc['store_path']}.txt")


def ensure_stash_dirs(stash_root: Path) -> None:
    get_inbox_path(stash_root).mkdir(parents=True, exist_ok=True)
    get_store_root(stash_root).mkdir(parents=True, exist_ok=True)
