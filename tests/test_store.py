import sqlite3

import pytest

from research_friend.storage import StashStore
from research_friend.storage.schema import SCHEMA_VERSION


def test_initialize_sets_schema_version(store):
    assert store.get_schema_version() == SCHEMA_VERSION
    # Idempotent
    store.initialize()
    assert store.get_schema_version() == SCHEMA_VERSION


def test_insert_and_get_document(store):
    doc_id = store.insert_document(
        filename="paper.pdf",
        file_type="pdf",
        summary="A paper",
        store_path="store/ml/paper.pdf",
        char_count=1234,
        primary_topic="ml",
        secondary_topics=["stats", "ml", "stats"],
    )

    doc = store.get_document(doc_id)
    assert doc["filename"] == "paper.pdf"
    assert doc["char_count"] == 1234
    assert doc["topics"] == [
        {"name": "ml", "description": None, "is_primary": True},
        {"name": "stats", "description": None, "is_primary": False},
    ]
    assert store.get_document(9999) is None


def test_get_or_create_topic_is_stable(store):
    first = store.get_or_create_topic("rust", "Rust language")
    second = store.get_or_create_topic("rust", "Ignored")
    assert first == second
    assert store.get_topics() == [{"id": first, "name": "rust", "description": "Rust language"}]


def test_topics_with_counts(store):
    store.get_or_create_topic("empty")
    store.insert_document("a.md", "md", None, "store/x/a.md", 1, "x")
    store.insert_document("b.md", "md", None, "store/x/b.md", 1, "x", ["y"])

    counts = {t["name"]: t["doc_count"] for t in store.get_topics_with_counts()}
    assert counts == {"x": 2, "y": 1, "empty": 0}


def test_update_document_replaces_topics(store):
    doc_id = store.insert_document("a.md", "md", "old", "store/x/a.md", 1, "x", ["y"])
    store.update_document(doc_id, "new", "store/z/a.md", 5, "z")

    doc = store.get_document(doc_id)
    assert doc["summary"] == "new"
    assert doc["store_path"] == "store/z/a.md"
    assert [t["name"] for t in doc["topics"]] == ["z"]
    assert store.get_document_by_store_path("store/z/a.md")["id"] == doc_id
    assert store.get_document_by_store_path("store/x/a.md") is None


def test_documents_by_topic_include_primary_flag(store):
    store.insert_document("a.md", "md", None, "store/x/a.md", 1, "x")
    store.insert_document("b.md", "md", None, "store/y/b.md", 1, "y", ["x"])

    docs = store.get_documents_by_topic("x")
    flags = {d["filename"]: bool(d["is_primary"]) for d in docs}
    assert flags == {"a.md": True, "b.md": False}


def test_search_by_filename_matches_any_term(store):
    store.insert_document("Rust-Guide.md", "md", None, "store/x/Rust-Guide.md", 1, "x")
    store.insert_document("python.md", "md", None, "store/y/python.md", 1, "y")
    store.insert_document("notes.md", "md", None, "store/y/notes.md", 1, "y")

    names = {d["filename"] for d in store.search_by_filename(["rust", "python"])}
    assert names == {"Rust-Guide.md", "python.md"}

    in_topic = store.search_by_filename(["rust", "python"], topic="y")
    assert [d["filename"] for d in in_topic] == ["python.md"]
    assert store.search_by_filename([]) == []


def test_only_one_primary_topic_per_document(store):
    doc_id = store.insert_document("a.md", "md", None, "store/x/a.md", 1, "x")
    topic_id = store.get_or_create_topic("other")
    with pytest.raises(sqlite3.IntegrityError):
        with store.connection() as conn:
            conn.execute(
                "INSERT INTO document_topics (doc_id, topic_id, is_primary) VALUES (?, ?, 1)",
                (doc_id, topic_id),
            )


def test_all_documents_newest_first(stash_root):
    store = StashStore(stash_root)
    store.initialize()
    first = store.insert_document("a.md", "md", None, "store/x/a.md", 1, "x")
    second = store.insert_document("b.md", "md", None, "store/x/b.md", 1, "x")
    assert [d["id"] for d in store.get_all_documents()] == [second, first]
