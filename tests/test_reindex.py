import asyncio

from conftest import FakeModelClient, add_document, classification_reply
from research_friend.stash import reindex_stash


def test_reindex_moves_document_to_new_topic(store, stash_root):
    doc_id = add_document(store, stash_root, "report.pdf", "misc", "report text")
    client = FakeModelClient(replies=[classification_reply("finance", ["reports"], summary="Q3.")])

    result = asyncio.run(reindex_stash(store, stash_root, client, [doc_id]))

    assert result["reindexed"] == [doc_id]
    assert result["errors"] == []
    doc = store.get_document(doc_id)
    assert doc["store_path"] == "store/finance/report.pdf"
    assert doc["summary"] == "Q3."
    assert [t["name"] for t in doc["topics"]] == ["finance", "reports"]

    assert (stash_root / "store" / "finance" / "report.pdf").exists()
    assert (stash_root / "store" / "finance" / "report.pdf.txt").read_text() == "report text"
    assert not (stash_root / "store" / "misc" / "report.pdf").exists()


def test_reindex_regenerates_missing_text(store, stash_root):
    doc_id = add_document(store, stash_root, "page.html", "web", "stale")
    (stash_root / "store" / "web" / "page.html.txt").unlink()
    client = FakeModelClient(replies=[classification_reply("web")])

    result = asyncio.run(
        reindex_stash(store, stash_root, client, [doc_id], extractor=lambda path, ft: "fresh text")
    )

    assert result["reindexed"] == [doc_id]
    assert (stash_root / "store" / "web" / "page.html.txt").read_text() == "fresh text"
    assert store.get_document(doc_id)["char_count"] == len("fresh text")


def test_reindex_all_collects_per_document_errors(store, stash_root):
    first = add_document(store, stash_root, "a.md", "x", "alpha")
    second = add_document(store, stash_root, "b.md", "x", "beta")
    # Newest document is reindexed first
    client = FakeModelClient(replies=["not json", classification_reply("y")])

    result = asyncio.run(reindex_stash(store, stash_root, client))

    assert result["reindexed"] == [first]
    assert result["errors"][0]["id"] == second
    assert store.get_document(first)["store_path"] == "store/y/a.md"


def test_reindex_unknown_id(store, stash_root):
    result = asyncio.run(reindex_stash(store, stash_root, FakeModelClient(), [42]))
    assert result["reindexed"] == []
    assert result["errors"] == [{"id": 42, "error": "Document not found: 42"}]


def test_reindex_refuses_to_overwrite_same_name_in_target_topic(store, stash_root):
    moving = add_document(store, stash_root, "a.md", "x", "from x")
    staying = add_document(store, stash_root, "a.md", "y", "from y")
    client = FakeModelClient(replies=[classification_reply("y")])

    result = asyncio.run(reindex_stash(store, stash_root, client, [moving]))

    assert result["reindexed"] == []
    assert result["errors"][0]["id"] == moving
    assert store.get_document(moving)["store_path"] == "store/x/a.md"
    assert store.get_document(staying)["store_path"] == "store/y/a.md"
    assert (stash_root / "store" / "x" / "a.md").read_text() == "from x"
    assert (stash_root / "store" / "y" / "a.md").read_text() == "from y"
