"""Web reading: URL extraction, PDF fetching, page fetching and search."""

from research_friend.web.ask import ask_web
from research_friend.web.content import HttpContentSource, detect_content_type, load_url_content, validate_url
from research_friend.web.extract import extract_from_url
from research_friend.web.fetch import fetch_web_page
from research_friend.web.pdf import fetch_pdf
from research_friend.web.search import search_web

__all__ = [
    "HttpContentSource",
    "ask_web",
    "detect_content_type",
    "extract_from_url",
    "fetch_pdf",
    "fetch_web_page",
    "load_url_content",
    "search_web",
    "validate_url",
]
