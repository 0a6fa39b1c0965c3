"""The research stash: inbox processing, classification, listing and search."""

from research_friend.stash.extract import ask_stash_document, extract_from_stash, search_in_stash_document
from research_friend.stash.inbox import process_inbox
from research_friend.stash.listing import list_stash
from research_friend.stash.reindex import reindex_stash
from research_friend.stash.search import search_stash

__all__ = [
    "ask_stash_document",
    "extract_from_stash",
    "list_stash",
    "process_inbox",
    "reindex_stash",
    "search_in_stash_document",
    "search_stash",
]
