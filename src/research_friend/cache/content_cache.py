"""Byte-budgeted LRU cache for fetched document content."""

import logging
import threading
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from research_friend.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 25 * 1024 * 1024


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def approximate_size(content: str) -> int:
    """Approximate in-memory size of ``content`` as two bytes per character."""
    return len(content) * 2


class ContentCache:
    """In-memory LRU cache keyed by source (URL or stash id).

    Total approximate size never exceeds ``max_bytes``. Entries are kept in
    access order; the least recently used entry is evicted first. An entry
    that alone exceeds the ceiling is never admitted.
    """

    def __init__(
        self,
        max_bytes: int = DEFAULT_MAX_BYTES,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.max_bytes = max_bytes
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._total_bytes = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` and mark it most recently used."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def put(
        self,
        key: str,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
        content_type: str = "",
    ) -> bool:
        """Store content for ``key``, evicting least recently used entries.

        Args:
            key: Source identifier
            content: Extracted document text
            metadata: Title, author, page count, etc.
            content_type: Tag such as "pdf" or "html"

        Returns:
            True if the entry was admitted, False if it is larger than the
            whole cache
        """
        size = approximate_size(content)
        if size > self.max_bytes:
            logger.debug(f"Cache: not admitting {key} ({size:,} bytes > {self.max_bytes:,})")
            return False

        entry = CacheEntry(
            content=content,
            metadata=dict(metadata or {}),
            size=size,
            content_type=content_type,
            fetched_at=self._clock(),
        )

        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._total_bytes -= previous.size

            while self._entries and self._total_bytes + size > self.max_bytes:
                evicted_key, evicted = self._entries.popitem(last=False)
                self._total_bytes -= evicted.size
                logger.debug(f"Cache: evicted {evicted_key} ({evicted.size:,} bytes)")

            self._entries[key] = entry
            self._total_bytes += size
        return True

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
            self._total_bytes = 0

    def stats(self) -> CacheStats:
        """Return the entry count and total approximate bytes."""
        with self._lock:
            return CacheStats(entry_count=len(self._entries), total_bytes=self._total_bytes)

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
