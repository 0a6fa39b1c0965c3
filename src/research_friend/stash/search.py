"""Full-text search over the stash using ripgrep."""

import asyncio
import functools
import json
import logging
import re
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from research_friend.errors import SearchToolError
from research_friend.models import FileMatches, LineMatch
from research_friend.stash.aggregate import DEFAULT_MAX_MATCHES_PER_DOC, aggregate_search_results
from research_friend.stash.extractors import EXTRACTION_TYPES
from research_friend.stash.paths import get_store_root
from research_friend.storage import StashStore

logger = logging.getLogger(__name__)

RipgrepRunner = Callable[[str, Path, int], Awaitable[str]]

_QUERY_TERM_RE = re.compile(r""""([^"]+)"|'([^']+)'|(\S+)""")
_REGEX_SPECIAL_RE = re.compile(r"[.*+?^${}()|\[\]\\]")


def parse_search_query(query: str) -> list[str]:
    """Split a query into terms; quoted strings stay whole phrases."""
    terms = []
    for match in _QUERY_TERM_RE.finditer(query):
        term = match.group(1) or match.group(2) or match.group(3)
        if term:
            terms.append(term)
    return terms


def escape_regex(term: str) -> str:
    return _REGEX_SPECIAL_RE.sub(lambda m: "\\" + m.group(0), term)


def build_ripgrep_pattern(terms: list[str]) -> str:
    """Alternation of the escaped terms, so any one of them finds candidates."""
    if not terms:
        return ""
    if len(terms) == 1:
        return escape_regex(terms[0])
    return "(" + "|".join(escape_regex(t) for t in terms) + ")"


async def run_ripgrep(
    pattern: str, search_path: Path, context: int = 2, rg_path: str = "rg"
) -> str:
    """Run ripgrep in JSON mode over extracted text and markdown files.

    Raises:
        SearchToolError: If ripgrep is missing or exits with an error
            (exit code 1 only means "no matches")
    """
    args = [
        "--json",
        "-i",
        "-C",
        str(context),
        "--glob",
        "*.txt",
        "--glob",
        "*.md",
        "--",
        pattern,
        str(search_path),
    ]
    try:
        proc = await asyncio.create_subprocess_exec(
            rg_path,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise SearchToolError(f"ripgrep not found at {rg_path!r}") from e

    stdout, stderr = await proc.communicate()
    if proc.returncode not in (0, 1):
        raise SearchToolError(f"ripgrep failed: {stderr.decode('utf-8', errors='replace')}")
    return stdout.decode("utf-8", errors="replace")


def get_store_path(file_path: Path | str, stash_root: Path | str) -> str:
    """Map a searched file back to the catalog path of its document.

    ``report.pdf.txt`` belongs to ``report.pdf``; plain ``.txt`` and
    ``.md`` files are their own documents.
    """
    relative = Path(file_path).relative_to(Path(stash_root)).as_posix()
    if relative.endswith(".txt"):
        without_txt = relative[: -len(".txt")]
        if without_txt.rsplit(".", 1)[-1].lower() in EXTRACTION_TYPES:
            return without_txt
    return relative


def _group_regions(lines: list[tuple[int, str, bool]]) -> list[LineMatch]:
    # Consecutive lines (match or context) form one region
    groups: list[list[tuple[int, str, bool]]] = []
    for entry in sorted(lines, key=lambda e: e[0]):
        if groups and entry[0] <= groups[-1][-1][0] + 1:
            groups[-1].append(entry)
        else:
            groups.append([entry])

    regions = []
    for group in groups:
        anchor = next((e for e in group if e[2]), group[0])
        regions.append(LineMatch(line=anchor[0], text=" ".join(e[1] for e in group)))
    return regions


def parse_ripgrep_output(output: str, stash_root: Path | str) -> list[FileMatches]:
    """Turn ripgrep ``--json`` output into per-file match regions."""
    lines_by_file: dict[str, list[tuple[int, str, bool]]] = {}

    for raw in output.strip().splitlines():
        if not raw:
            continue
        message = json.loads(raw)
        if message.get("type") not in ("match", "context"):
            continue
        data = message["data"]
        store_path = get_store_path(data["path"]["text"], stash_root)
        lines_by_file.setdefault(store_path, []).append(
            (data["line_number"], data["lines"]["text"].strip(), message["type"] == "match")
        )

    return [
        FileMatches(store_path=store_path, matches=_group_regions(lines))
        for store_path, lines in lines_by_file.items()
    ]


def _contains_all(text: str, lower_terms: list[str]) -> bool:
    lowered = text.lower()
    return all(term in lowered for term in lower_terms)


async def search_stash(
    store: StashStore,
    stash_root: Path,
    query: str,
    topic: Optional[str] = None,
    ids: Optional[list[int]] = None,
    limit: int = 20,
    offset: int = 0,
    max_matches_per_doc: int = DEFAULT_MAX_MATCHES_PER_DOC,
    context: int = 1,
    runner: Optional[RipgrepRunner] = None,
    rg_path: str = "rg",
) -> dict[str, Any]:
    """Search stashed documents by content and filename.

    Every term must appear within one match region (or in the filename)
    for a document to be returned. Filename matches rank first.

    Args:
        store: Stash catalog
        stash_root: Root directory of the stash
        query: Words and quoted phrases
        topic: Restrict to one topic directory
        ids: Restrict to these document ids
        limit: Page size
        offset: Page start
        max_matches_per_doc: Cap on content regions per document
        context: Context lines around each ripgrep match
        runner: Replacement ripgrep runner (pattern, path, context) -> output
        rg_path: ripgrep executable used by the default runner

    Returns:
        Dict with the query echo, ``total_matches``, ``count`` and the
        paginated ``results``
    """
    stash_root = Path(stash_root)

    def result(hits: list) -> dict[str, Any]:
        page = hits[offset : offset + limit]
        return {
            "query": query,
            "topic": topic,
            "ids": ids or None,
            "total_matches": len(hits),
            "count": len(page),
            "offset": offset,
            "limit": limit,
            "results": [hit.to_dict() for hit in page],
        }

    if topic and (".." in topic or "/" in topic):
        return result([])

    terms = parse_search_query(query)
    if not terms:
        return result([])

    ids_filter = set(ids) if ids else None
    search_path = get_store_root(stash_root)
    if topic:
        search_path = search_path / topic
    if not search_path.exists():
        return result([])

    if runner is None:
        runner = functools.partial(run_ripgrep, rg_path=rg_path)

    output = await runner(build_ripgrep_pattern(terms), search_path, context)
    lower_terms = [t.lower() for t in terms]

    content_matches = []
    for file_matches in parse_ripgrep_output(output, stash_root):
        regions = [m for m in file_matches.matches if _contains_all(m.text, lower_terms)]
        if not regions:
            continue
        doc = store.get_document_by_store_path(file_matches.store_path)
        if doc is None or (ids_filter and doc["id"] not in ids_filter):
            continue
        content_matches.append((doc, regions))

    filename_matches = [
        doc
        for doc in store.search_by_filename(terms, topic)
        if (not ids_filter or doc["id"] in ids_filter)
        and _contains_all(doc["filename"], lower_terms)
    ]

    hits = aggregate_search_results(content_matches, filename_matches, max_matches_per_doc)
    logger.debug(f"Stash search {query!r}: {len(hits)} documents")
    return result(hits)
