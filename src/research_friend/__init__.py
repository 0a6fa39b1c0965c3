"""research-friend: fetch, stash and query documents through an LLM."""

__version__ = "0.1.0"
