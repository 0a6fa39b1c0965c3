"""Loading URL content: type detection, PDF and page fetching, caching."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import httpx

from research_friend.cache import ContentCache
from research_friend.models import FetchedContent
from research_friend.protocols import ContentSource
from research_friend.utils.html import html_to_markdown
from research_friend.utils.pdf import parse_pdf_bytes
from research_friend.web.browser import browser_page

logger = logging.getLogger(__name__)

DEFAULT_PAGE_TIMEOUT_MS = 15000
DEFAULT_HTTP_TIMEOUT = 30.0

ALLOWED_SCHEMES = ("http", "https")


def validate_url(url: str) -> str:
    """Return ``url`` if it is http(s), else raise ValueError."""
    if urlparse(url).scheme.lower() not in ALLOWED_SCHEMES:
        raise ValueError("Only http/https URLs are allowed")
    return url


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_pdf_content_type(content_type: str) -> bool:
    return "application/pdf" in content_type.lower()


async def detect_content_type(url: str, timeout: float = DEFAULT_HTTP_TIMEOUT) -> str:
    """Content-Type of ``url`` from a HEAD request.

    When the request fails the type is guessed from the URL: ``.pdf``
    means PDF, anything else is treated as HTML.
    """
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
            response = await client.head(url)
        return response.headers.get("content-type", "").lower()
    except httpx.HTTPError as e:
        logger.debug(f"HEAD {url} failed ({e}), guessing type from URL")
        if url.lower().endswith(".pdf"):
            return "application/pdf"
        return "text/html"


class HttpContentSource:
    """ContentSource backed by httpx + pypdf for PDFs and Playwright for pages.

    Args:
        wait_ms: Extra wait after page load
        timeout_ms: Max page load time
        headless: Run the browser without UI
        http_timeout: Timeout in seconds for HTTP requests
    """

    def __init__(
        self,
        wait_ms: int = 0,
        timeout_ms: int = DEFAULT_PAGE_TIMEOUT_MS,
        headless: bool = True,
        http_timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.wait_ms = wait_ms
        self.timeout_ms = timeout_ms
        self.headless = headless
        self.http_timeout = http_timeout

    async def fetch(self, url: str) -> FetchedContent:
        content_type = await detect_content_type(url, timeout=self.http_timeout)
        if is_pdf_content_type(content_type):
            return await self.fetch_pdf(url)
        return await self.fetch_page(url)

    async def fetch_pdf(self, url: str) -> FetchedContent:
        async with httpx.AsyncClient(follow_redirects=True, timeout=self.http_timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
        parsed = await asyncio.to_thread(parse_pdf_bytes, response.content)
        return FetchedContent(
            text=parsed.text,
            content_type="pdf",
            metadata={
                "title": parsed.title,
                "author": parsed.author,
                "creation_date": parsed.creation_date,
                "page_count": parsed.page_count,
            },
        )

    async def fetch_page(self, url: str) -> FetchedContent:
        async with browser_page(headless=self.headless) as page:
            response = await page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
            if response is None:
                raise RuntimeError(f"No response received for {url}")
            final_url = validate_url(page.url)
            if self.wait_ms > 0:
                await page.wait_for_timeout(self.wait_ms)
            title = await page.title()
            raw_html = await page.content()

        text = await asyncio.to_thread(html_to_markdown, raw_html, final_url)
        return FetchedContent(
            text=text,
            content_type="html",
            metadata={"title": title or None, "final_url": final_url},
        )


async def load_url_content(
    url: str,
    source: ContentSource,
    cache: Optional[ContentCache] = None,
    pdf_only: bool = False,
) -> FetchedContent:
    """Return the extracted content of ``url``, from cache when possible.

    With ``pdf_only`` the source is asked for a PDF directly and only
    cache entries tagged ``pdf`` are reused.

    Raises:
        ValueError: If ``url`` is not http(s)
    """
    validate_url(url)

    if cache is not None:
        entry = cache.get(url)
        if entry is not None and (not pdf_only or entry.content_type == "pdf"):
            logger.debug(f"Cache hit for {url}")
            return FetchedContent(
                text=entry.content,
                content_type=entry.content_type,
                metadata=dict(entry.metadata),
            )

    if pdf_only:
        content = await source.fetch_pdf(url)
    else:
        content = await source.fetch(url)

    if cache is not None:
        cache.put(url, content.text, content.metadata, content.content_type)
    return content
