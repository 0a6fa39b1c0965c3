"""Content caching."""

from research_friend.cache.content_cache import ContentCache, approximate_size

__all__ = ["ContentCache", "approximate_size"]
