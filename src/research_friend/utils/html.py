"""HTML to text conversion."""

from typing import Optional

import trafilatura
from bs4 import BeautifulSoup


def _body_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    body = soup.body or soup
    return body.get_text("\n", strip=True)


def html_to_text(html: str, url: Optional[str] = None) -> str:
    """Main-content text of a page, falling back to the whole body text."""
    extracted = trafilatura.extract(html, url=url, output_format="txt")
    return extracted or _body_text(html)


def html_to_markdown(html: str, url: Optional[str] = None) -> str:
    """Main content of a page as markdown, links included."""
    extracted = trafilatura.extract(
        html,
        url=url,
        output_format="markdown",
        include_links=True,
        include_formatting=True,
    )
    return extracted or _body_text(html)
