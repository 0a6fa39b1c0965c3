import asyncio

from conftest import FakeModelClient, classification_reply
from research_friend.stash import process_inbox


def read_text(path, file_type):
    return path.read_text(encoding="utf-8")


def test_process_inbox_files_documents_and_collects_errors(store, stash_root, inbox):
    (inbox / "broken.txt").write_text("cannot be classified")
    (inbox / "image.png").write_bytes(b"\x89PNG")
    (inbox / "page.html").write_text("extracted page text")
    (inbox / "paper.md").write_text("# Paper\nbody")
    (inbox / ".hidden").write_text("skip me")
    (inbox / "subdir").mkdir()

    client = FakeModelClient(
        replies=[
            "no structured answer here",
            classification_reply("web", summary="A page."),
            classification_reply("ml", ["papers"], ["ml"], summary="A paper."),
        ]
    )

    result = asyncio.run(process_inbox(store, stash_root, client, extractor=read_text))

    assert result["processed"] == ["page.html", "paper.md"]
    assert [e["filename"] for e in result["errors"]] == ["broken.txt", "image.png"]
    assert result["errors"][1]["error"] == "Unsupported file type"
    assert len(result["documents"]) == 2
    assert len(client.calls) == 3

    store_root = stash_root / "store"
    assert (store_root / "web" / "page.html").exists()
    assert (store_root / "web" / "page.html.txt").read_text() == "extracted page text"
    assert (store_root / "ml" / "paper.md").exists()
    assert not (store_root / "ml" / "paper.md.txt").exists()

    remaining = sorted(p.name for p in inbox.iterdir())
    assert remaining == [".hidden", "broken.txt", "image.png", "subdir"]

    paper = store.get_document_by_store_path("store/ml/paper.md")
    assert paper["summary"] == "A paper."
    assert paper["char_count"] == len("# Paper\nbody")
    topics = {t["name"]: t["description"] for t in store.get_topics()}
    assert topics["ml"] == "About ml"
    assert "papers" in topics


def test_empty_inbox(store, stash_root):
    result = asyncio.run(process_inbox(store, stash_root, FakeModelClient()))
    assert result == {"processed": [], "errors": [], "documents": []}


def test_same_name_in_same_topic_is_reported_not_overwritten(store, stash_root, inbox):
    (inbox / "notes.md").write_text("first document")
    client = FakeModelClient(
        replies=[classification_reply("topic-a"), classification_reply("topic-a")]
    )
    asyncio.run(process_inbox(store, stash_root, client, extractor=read_text))

    (inbox / "notes.md").write_text("second document")
    result = asyncio.run(process_inbox(store, stash_root, client, extractor=read_text))

    assert result["processed"] == []
    assert result["errors"][0]["filename"] == "notes.md"
    assert "already stored under topic-a" in result["errors"][0]["error"]
    assert [d["store_path"] for d in store.get_all_documents()] == ["store/topic-a/notes.md"]
    assert (stash_root / "store" / "topic-a" / "notes.md").read_text() == "first document"
    assert (inbox / "notes.md").read_text() == "second document"
