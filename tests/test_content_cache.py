from datetime import datetime, timezone

from research_friend.cache import ContentCache, approximate_size


def test_size_is_two_bytes_per_char():
    assert approximate_size("abc") == 6


def test_put_and_get():
    fixed = datetime(2024, 1, 1, tzinfo=timezone.utc)
    cache = ContentCache(max_bytes=1000, clock=lambda: fixed)

    assert cache.put("u1", "hello", {"title": "T"}, "html")
    entry = cache.get("u1")

    assert entry.content == "hello"
    assert entry.metadata == {"title": "T"}
    assert entry.content_type == "html"
    assert entry.size == 10
    assert entry.fetched_at == fixed
    assert cache.get("missing") is None


def test_total_size_stays_under_ceiling():
    cache = ContentCache(max_bytes=100)
    for i in range(20):
        cache.put(f"u{i}", "x" * 15)
        assert cache.stats().total_bytes <= 100
    assert len(cache) == 3


def test_least_recently_used_is_evicted_first():
    """A read refreshes an entry, so the untouched one goes first."""
    cache = ContentCache(max_bytes=60)
    cache.put("a", "x" * 10)
    cache.put("b", "x" * 10)
    cache.put("c", "x" * 10)
    cache.get("a")

    cache.put("d", "x" * 10)

    assert "b" not in cache
    assert cache.keys() == ["c", "a", "d"]


def test_oversized_entry_is_refused_without_eviction():
    cache = ContentCache(max_bytes=50)
    cache.put("small", "x" * 10)

    assert cache.put("huge", "x" * 26) is False
    assert "huge" not in cache
    assert "small" in cache
    assert cache.stats().total_bytes == 20


def test_replacing_a_key_updates_size():
    cache = ContentCache(max_bytes=100)
    cache.put("a", "x" * 10)
    cache.put("a", "x" * 20)

    assert len(cache) == 1
    assert cache.stats().total_bytes == 40
    assert cache.get("a").content == "x" * 20


def test_clear():
    cache = ContentCache(max_bytes=100)
    cache.put("a", "x")
    cache.clear()
    assert len(cache) == 0
    assert cache.stats().total_bytes == 0


def test_touched_entry_survives_unrelated_put_when_room_remains():
    cache = ContentCache(max_bytes=100)
    cache.put("a", "x" * 10)
    cache.put("b", "x" * 10)
    cache.get("a")

    cache.put("c", "x" * 10)

    assert cache.keys() == ["b", "a", "c"]
