"""Protocol for fetching URL content."""

from typing import Protocol, runtime_checkable

from research_friend.models import FetchedContent


@runtime_checkable
class ContentSource(Protocol):
    """Protocol for turning a URL into extracted text.

    Implementations decide between PDF parsing and page rendering.
    Errors propagate unchanged to the caller.
    """

    async def fetch(self, url: str) -> FetchedContent:
        """Fetch and extract the document at ``url``."""
        ...

    async def fetch_pdf(self, url: str) -> FetchedContent:
        """Fetch ``url`` as a PDF, skipping content-type detection."""
        ...
