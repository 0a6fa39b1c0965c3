"""Stash catalog storage."""

from research_friend.storage.store import StashStore

__all__ = ["StashStore"]
