"""Shared fakes and fixtures."""

import json
from pathlib import Path

import pytest

from research_friend.models import FetchedContent, ModelReply
from research_friend.stash.paths import ensure_stash_dirs, get_inbox_path
from research_friend.storage import StashStore


class FakeModelClient:
    """Records every call and replies from a script, then with "answer N"."""

    def __init__(self, replies=None, model="fake-model"):
        self.replies = list(replies or [])
        self.model = model
        self.calls = []

    async def create_message(self, *, prompt, system_prompt, max_tokens, timeout_ms):
        self.calls.append(
            {
                "prompt": prompt,
                "system_prompt": system_prompt,
                "max_tokens": max_tokens,
                "timeout_ms": timeout_ms,
            }
        )
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            content = reply
        else:
            content = f"answer {len(self.calls)}"
        return ModelReply(content=content, model=self.model)


class FakeContentSource:
    """Serves canned content per URL and counts fetches."""

    def __init__(self, pages=None, pdfs=None):
        self.pages = pages or {}
        self.pdfs = pdfs or {}
        self.fetches = []

    async def fetch(self, url):
        self.fetches.append(("fetch", url))
        if url in self.pdfs:
            return self.pdfs[url]
        return self.pages[url]

    async def fetch_pdf(self, url):
        self.fetches.append(("fetch_pdf", url))
        return self.pdfs[url]


def classification_reply(primary, secondary=(), new_topics=(), summary="A document."):
    """Model reply text for a classification request."""
    body = {
        "summary": summary,
        "primaryTopic": primary,
        "secondaryTopics": list(secondary),
        "newTopics": [{"name": n, "description": f"About {n}"} for n in new_topics],
    }
    return "Here you go:\n" + json.dumps(body)


def pdf_content(text="PDF body text", title="A Paper"):
    return FetchedContent(
        text=text,
        content_type="pdf",
        metadata={"title": title, "author": "Ada", "creation_date": None, "page_count": 3},
    )


def html_content(text="Page body text", title="A Page"):
    return FetchedContent(
        text=text,
        content_type="html",
        metadata={"title": title, "final_url": "https://example.com/page"},
    )


@pytest.fixture
def stash_root(tmp_path) -> Path:
    root = tmp_path / "stash"
    ensure_stash_dirs(root)
    return root


@pytest.fixture
def store(stash_root) -> StashStore:
    store = StashStore(stash_root)
    store.initialize()
    return store


@pytest.fixture
def inbox(stash_root) -> Path:
    return get_inbox_path(stash_root)


def add_document(store, stash_root, filename, topic, text, file_type=None, secondary=None):
    """File ``text`` directly into the store and catalog it."""
    file_type = file_type or filename.rsplit(".", 1)[-1]
    topic_dir = stash_root / "store" / topic
    topic_dir.mkdir(parents=True, exist_ok=True)
    if file_type in ("md", "txt"):
        (topic_dir / filename).write_text(text, encoding="utf-8")
    else:
        (topic_dir / filename).write_bytes(b"original")
        (topic_dir / f"{filename}.txt").write_text(text, encoding="utf-8")
    return store.insert_document(
        filename=filename,
        file_type=file_type,
        summary=f"Summary of {filename}",
        store_path=f"store/{topic}/{filename}",
        char_count=len(text),
        primary_topic=topic,
        secondary_topics=secondary,
    )
