"""Web search by scraping DuckDuckGo, Google or Bing result pages."""

import logging
from typing import Any, Callable
from urllib.parse import quote_plus

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from research_friend.web.browser import browser_page
from research_friend.web.content import DEFAULT_PAGE_TIMEOUT_MS, utc_timestamp

logger = logging.getLogger(__name__)

SEARCH_URLS = {
    "duckduckgo": "https://duckduckgo.com/?q={query}&t=h_&ia=web",
    "google": "https://www.google.com/search?q={query}",
    "bing": "https://www.bing.com/search?q={query}",
}


def _text(element: Tag | None) -> str:
    return element.get_text(strip=True) if element is not None else ""


def parse_duckduckgo_results(html: str, max_results: int) -> list[dict[str, str]]:
    soup = BeautifulSoup(html, "html.parser")
    results = []
    for el in soup.select('[data-testid="result"]'):
        if len(results) >= max_results:
            break
        title_el = el.select_one('[data-testid="result-title-a"]')
        if title_el is None:
            continue
        results.append(
            {
                "title": _text(title_el),
                "url": title_el.get("href", ""),
                "snippet": _text(el.select_one('[data-testid="result-snippet"]')),
            }
        )
    return results


def parse_bing_results(html: str, max_results: int) -> list[dict[str, str]]:
    soup = BeautifulSoup(html, "html.parser")
    results = []
    for el in soup.select(".b_algo"):
        if len(results) >= max_results:
            break
        title_el = el.select_one("h2 a")
        if title_el is None:
            continue
        results.append(
            {
                "title": _text(title_el),
                "url": title_el.get("href", ""),
                "snippet": _text(el.select_one(".b_caption p")),
            }
        )
    return results


def _google_snippet(link: Tag, title: str) -> str:
    # Climb a few levels to the element that holds the whole result
    container = link.parent
    for _ in range(5):
        parent = container.parent if container is not None else None
        if parent is not None and parent.name not in ("body", "[document]"):
            container = parent
    if container is None:
        return ""

    # Ancestors of the link would repeat the title inside the snippet
    link_ancestors = {id(parent) for parent in link.parents}
    blocks = [
        text
        for text in (
            el.get_text(" ", strip=True)
            for el in container.find_all(["div", "span", "p"])
            if id(el) not in link_ancestors
        )
        if len(text) > 30 and text != title and "›" not in text
    ]
    return max(blocks, key=len) if blocks else ""


def parse_google_results(html: str, max_results: int) -> list[dict[str, str]]:
    soup = BeautifulSoup(html, "html.parser")
    results = []
    for heading in soup.select("a h3"):
        if len(results) >= max_results:
            break
        link = heading.find_parent("a")
        if link is None:
            continue
        url = link.get("href", "")
        if not url or url.startswith("/search") or "google.com/search" in url:
            continue
        title = _text(heading)
        if title:
            results.append({"title": title, "url": url, "snippet": _google_snippet(link, title)})
    return results


async def _wait_for_results(page: Page, engine: str, timeout_ms: int) -> None:
    try:
        if engine == "duckduckgo":
            await page.wait_for_selector('[data-testid="result"]', timeout=timeout_ms)
        elif engine == "google":
            await page.wait_for_function(
                "() => document.querySelectorAll('a > h3').length >= 3", timeout=timeout_ms
            )
        else:
            await page.wait_for_selector("#b_results", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        # No results is a valid outcome; the caller falls back to raw HTML
        logger.debug(f"{engine}: timed out waiting for results")


PARSERS: dict[str, Callable[[str, int], list[dict[str, str]]]] = {
    "duckduckgo": parse_duckduckgo_results,
    "google": parse_google_results,
    "bing": parse_bing_results,
}


async def search_web(
    query: str,
    engine: str = "duckduckgo",
    max_results: int = 10,
    timeout_ms: int = DEFAULT_PAGE_TIMEOUT_MS,
    headless: bool = True,
) -> dict[str, Any]:
    """Search the web with a real browser and scrape the result list.

    When nothing parses, the result page HTML is returned in
    ``fallback_result_html`` so the caller can inspect it.

    Raises:
        ValueError: If ``engine`` is not duckduckgo, google or bing
    """
    if engine not in PARSERS:
        raise ValueError(f"Unknown search engine: {engine}")

    search_url = SEARCH_URLS[engine].format(query=quote_plus(query))
    async with browser_page(headless=headless) as page:
        await page.goto(search_url, wait_until="domcontentloaded", timeout=timeout_ms)
        await _wait_for_results(page, engine, timeout_ms)
        html = await page.content()

    results = PARSERS[engine](html, max_results)
    logger.info(f"Web search ({engine}) for {query!r}: {len(results)} results")
    return {
        "query": query,
        "engine": engine,
        "results": results,
        "searched_at": utc_timestamp(),
        "fallback_result_html": None if results else html,
    }
