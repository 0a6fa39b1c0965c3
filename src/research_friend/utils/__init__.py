"""Utility functions for research-friend."""

from research_friend.utils.text import line_to_offset, search_text, truncate

__all__ = ["line_to_offset", "search_text", "truncate"]
