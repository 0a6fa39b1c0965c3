import asyncio
import json

from conftest import add_document
from research_friend.stash import search_stash
from research_friend.stash.search import (
    build_ripgrep_pattern,
    get_store_path,
    parse_ripgrep_output,
    parse_search_query,
)


def rg_line(kind, path, line_number, text):
    return json.dumps(
        {
            "type": kind,
            "data": {
                "path": {"text": str(path)},
                "lines": {"text": text + "\n"},
                "line_number": line_number,
            },
        }
    )


class FakeRipgrep:
    def __init__(self, output=""):
        self.output = output
        self.calls = []

    async def __call__(self, pattern, path, context):
        self.calls.append((pattern, path, context))
        return self.output


def test_parse_search_query_keeps_quoted_phrases():
    assert parse_search_query('rust "error handling" \'async fn\' tips') == [
        "rust",
        "error handling",
        "async fn",
        "tips",
    ]
    assert parse_search_query("   ") == []


def test_build_ripgrep_pattern_escapes_terms():
    assert build_ripgrep_pattern([]) == ""
    assert build_ripgrep_pattern(["c++"]) == r"c\+\+"
    assert build_ripgrep_pattern(["a.b", "(x)"]) == r"(a\.b|\(x\))"


def test_get_store_path(tmp_path):
    root = tmp_path
    assert get_store_path(root / "store/x/paper.pdf.txt", root) == "store/x/paper.pdf"
    assert get_store_path(root / "store/x/page.html.txt", root) == "store/x/page.html"
    assert get_store_path(root / "store/x/notes.txt", root) == "store/x/notes.txt"
    assert get_store_path(root / "store/x/readme.md", root) == "store/x/readme.md"


def test_parse_ripgrep_output_groups_consecutive_lines(tmp_path):
    path = tmp_path / "store/x/notes.md"
    output = "\n".join(
        [
            json.dumps({"type": "begin", "data": {"path": {"text": str(path)}}}),
            rg_line("context", path, 1, "before"),
            rg_line("match", path, 2, "the match"),
            rg_line("context", path, 3, "after"),
            rg_line("match", path, 10, "far away"),
            json.dumps({"type": "summary", "data": {}}),
        ]
    )

    [file_matches] = parse_ripgrep_output(output, tmp_path)

    assert file_matches.store_path == "store/x/notes.md"
    assert [(m.line, m.text) for m in file_matches.matches] == [
        (2, "before the match after"),
        (10, "far away"),
    ]


def test_search_requires_all_terms(store, stash_root):
    both = add_document(store, stash_root, "one.md", "x", "rust and async here")
    add_document(store, stash_root, "two.md", "x", "only rust here")
    output = "\n".join(
        [
            rg_line("match", stash_root / "store/x/one.md", 1, "rust and async here"),
            rg_line("match", stash_root / "store/x/two.md", 1, "only rust here"),
        ]
    )
    runner = FakeRipgrep(output)

    result = asyncio.run(search_stash(store, stash_root, "rust async", runner=runner))

    assert runner.calls[0][0] == "(rust|async)"
    assert runner.calls[0][2] == 1
    assert result["total_matches"] == 1
    hit = result["results"][0]
    assert hit["id"] == both
    assert hit["match_type"] == "content"
    assert hit["matches"] == [{"line": 1, "context": "rust and async here"}]


def test_filename_matches_come_first(store, stash_root):
    content_doc = add_document(store, stash_root, "a.md", "x", "all about rust")
    named_doc = add_document(store, stash_root, "rust-notes.md", "x", "nothing")
    output = rg_line("match", stash_root / "store/x/a.md", 1, "all about rust")

    result = asyncio.run(search_stash(store, stash_root, "rust", runner=FakeRipgrep(output)))

    assert [(r["id"], r["match_type"]) for r in result["results"]] == [
        (named_doc, "filename"),
        (content_doc, "content"),
    ]


def test_ids_filter_and_pagination(store, stash_root):
    ids = [add_document(store, stash_root, f"rust{i}.md", "x", "text") for i in range(3)]
    runner = FakeRipgrep()

    result = asyncio.run(
        search_stash(store, stash_root, "rust", ids=ids[:2], limit=1, offset=1, runner=runner)
    )

    assert result["total_matches"] == 2
    assert result["count"] == 1
    assert result["ids"] == ids[:2]


def test_topic_restricts_search_path(store, stash_root):
    add_document(store, stash_root, "a.md", "x", "text")
    runner = FakeRipgrep()

    asyncio.run(search_stash(store, stash_root, "text", topic="x", runner=runner))

    assert runner.calls[0][1] == stash_root / "store" / "x"


def test_unsafe_or_missing_topic_returns_empty(store, stash_root):
    runner = FakeRipgrep()
    for topic in ("../secrets", "a/b", "no-such-topic"):
        result = asyncio.run(search_stash(store, stash_root, "x", topic=topic, runner=runner))
        assert result["results"] == []
        assert result["total_matches"] == 0
    assert runner.calls == []


def test_empty_query_returns_empty(store, stash_root):
    result = asyncio.run(search_stash(store, stash_root, "  ", runner=FakeRipgrep()))
    assert result["results"] == []
