"""Single-page fetching with rendered output in several formats."""

import asyncio
import logging
from typing import Any

from bs4 import BeautifulSoup

from research_friend.utils import truncate
from research_friend.utils.html import html_to_markdown
from research_friend.web.browser import browser_page
from research_friend.web.content import DEFAULT_PAGE_TIMEOUT_MS, utc_timestamp

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("markdown", "text", "html")

# (result key, tag, matching attributes, attribute holding the value)
_META_FIELDS = [
    ("description", "meta", {"name": "description"}, "content"),
    ("author", "meta", {"name": "author"}, "content"),
    ("published_time", "meta", {"property": "article:published_time"}, "content"),
    ("site_name", "meta", {"property": "og:site_name"}, "content"),
    ("canonical", "link", {"rel": "canonical"}, "href"),
    ("og_title", "meta", {"property": "og:title"}, "content"),
    ("og_url", "meta", {"property": "og:url"}, "content"),
]


def extract_page_meta(html: str) -> dict[str, str]:
    """Description, author, Open Graph and canonical fields present in ``html``."""
    soup = BeautifulSoup(html, "html.parser")
    meta = {}
    for key, tag, attrs, value_attr in _META_FIELDS:
        element = soup.find(tag, attrs=attrs)
        value = element.get(value_attr) if element else None
        if value:
            meta[key] = value
    return meta


def render_page(
    raw_html: str,
    body_text: str,
    final_url: str,
    output_format: str = "markdown",
    max_chars: int = 40000,
    include_html: bool = False,
) -> dict[str, Any]:
    """Format fetched page content and apply the character limit.

    Raises:
        ValueError: If ``output_format`` is not markdown, text or html
    """
    if output_format == "markdown":
        rendered = html_to_markdown(raw_html, url=final_url)
    elif output_format == "text":
        rendered = body_text
    elif output_format == "html":
        rendered = raw_html
    else:
        raise ValueError(f"Unknown output format: {output_format}")

    content, truncated = truncate(rendered, max_chars)
    result: dict[str, Any] = {"content": content, "truncated": truncated}
    if include_html:
        result["html"] = truncate(raw_html, max_chars)[0]
        result["truncated"] = truncated or len(raw_html) > max_chars
    return result


async def fetch_web_page(
    url: str,
    wait_ms: int = 0,
    timeout_ms: int = DEFAULT_PAGE_TIMEOUT_MS,
    max_chars: int = 40000,
    include_html: bool = False,
    headless: bool = True,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Render ``url`` in Chromium and return its content and metadata.

    Args:
        url: Page to fetch
        wait_ms: Extra wait after the DOM is loaded
        timeout_ms: Max navigation time
        max_chars: Limit for returned content (and raw HTML)
        include_html: Also return the raw HTML
        headless: Run the browser without UI
        output_format: "markdown", "text" or "html"
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format}")

    async with browser_page(headless=headless) as page:
        response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        if response is None:
            raise RuntimeError(f"No response received for {url}")
        if wait_ms > 0:
            await page.wait_for_timeout(wait_ms)

        title = await page.title()
        raw_html = await page.content()
        final_url = page.url
        body_text = ""
        if output_format == "text":
            body_text = await page.evaluate("() => document.body ? document.body.innerText : ''")

    logger.debug(f"Fetched {url} ({len(raw_html):,} chars of HTML)")
    rendered = await asyncio.to_thread(
        render_page, raw_html, body_text, final_url, output_format, max_chars, include_html
    )
    return {
        "url": url,
        "final_url": final_url,
        "title": title or None,
        **rendered,
        "meta": extract_page_meta(raw_html),
        "fetched_at": utc_timestamp(),
    }
