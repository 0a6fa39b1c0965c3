"""CLI entry point for research-friend."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Literal, Optional, cast

from research_friend import __version__
from research_friend.config import Settings, load_settings
from research_friend.errors import DocumentNotFoundError, SearchToolError
from research_friend.stash import extract_from_stash, list_stash, search_stash
from research_friend.stash.inbox import iter_inbox_files
from research_friend.stash.paths import ensure_stash_dirs, get_inbox_path, get_store_root
from research_friend.storage import StashStore

# basicConfig writes to stderr, which keeps the stdio transport clean
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def _open_store(settings: Settings) -> StashStore:
    if not (settings.stash_root / "stash.db").exists():
        logger.error(f"No stash at {settings.stash_root}")
        logger.error("Run 'research-friend init' first")
        sys.exit(1)
    return StashStore(settings.stash_root)


def _print_json(result: dict) -> None:
    print(json.dumps(result, indent=2, default=str))


def serve(settings: Settings, transport: str = "stdio") -> None:
    """Start the MCP server.

    Args:
        settings: Runtime settings
        transport: Transport protocol (stdio or sse)
    """
    # Import here to avoid loading MCP unless needed
    from research_friend.server import create_mcp_server

    logger.info(f"Serving stash {settings.stash_root} via {transport}")
    mcp = create_mcp_server(settings)
    mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))


def init(settings: Settings) -> None:
    """Create the stash directories and database."""
    ensure_stash_dirs(settings.stash_root)
    store = StashStore(settings.stash_root)
    store.initialize()
    logger.info(f"Stash ready at {settings.stash_root}")
    logger.info(f"  Drop documents into {get_inbox_path(settings.stash_root)}")


def info(settings: Settings) -> None:
    """Show information about the stash."""
    store = _open_store(settings)
    topics = store.get_topics_with_counts()
    documents = store.get_all_documents()
    inbox = get_inbox_path(settings.stash_root)
    waiting = list(iter_inbox_files(inbox)) if inbox.exists() else []

    print(f"research-friend {__version__}")
    print(f"  Stash: {settings.stash_root}")
    print(f"  Store: {get_store_root(settings.stash_root)}")
    print(f"  Schema version: {store.get_schema_version()}")
    print(f"")
    print(f"Contents:")
    print(f"  Documents: {len(documents)}")
    print(f"  Topics: {len(topics)}")
    print(f"  Waiting in inbox: {len(waiting)}")
    if topics:
        print(f"")
        print(f"Topics:")
        for topic in topics:
            print(f"  {topic['name']:<40} {topic['doc_count']:>5}")


def list_documents(settings: Settings, topic: Optional[str], limit: int, offset: int) -> None:
    """Print stash documents, optionally for one topic."""
    _print_json(list_stash(_open_store(settings), topic, limit, offset))


def search(settings: Settings, query: str, topic: Optional[str], limit: int) -> None:
    """Search stashed documents by content and filename."""
    store = _open_store(settings)
    try:
        result = asyncio.run(
            search_stash(
                store,
                settings.stash_root,
                query,
                topic=topic,
                limit=limit,
                rg_path=settings.ripgrep_path,
            )
        )
    except SearchToolError as e:
        logger.error(str(e))
        sys.exit(1)
    _print_json(result)


def extract(
    settings: Settings,
    doc_id: int,
    max_chars: int,
    offset: Optional[int],
    line: Optional[int],
) -> None:
    """Print a page of a stashed document's text."""
    store = _open_store(settings)
    try:
        result = extract_from_stash(store, settings.stash_root, doc_id, max_chars, offset, line)
    except (DocumentNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
    _print_json(result)


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="research-friend",
        description="research-friend - web reading and a personal research stash over MCP",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the MCP server",
    )
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )

    # init command
    subparsers.add_parser(
        "init",
        help="Create the stash directories and database",
    )

    # info command
    subparsers.add_parser(
        "info",
        help="Show information about the stash",
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List stashed documents",
    )
    list_parser.add_argument("--topic", help="Only list documents in this topic")
    list_parser.add_argument("--limit", type=int, default=50, help="Maximum documents (default: 50)")
    list_parser.add_argument("--offset", type=int, default=0, help="Documents to skip (default: 0)")

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search stashed documents",
    )
    search_parser.add_argument("query", help="Words and \"quoted phrases\" that must all match")
    search_parser.add_argument("--topic", help="Only search this topic")
    search_parser.add_argument("--limit", type=int, default=20, help="Maximum results (default: 20)")

    # extract command
    extract_parser = subparsers.add_parser(
        "extract",
        help="Print the text of a stashed document",
    )
    extract_parser.add_argument("id", type=int, help="Document ID")
    extract_parser.add_argument(
        "--max-chars",
        type=int,
        default=40000,
        help="Maximum characters to print (default: 40000)",
    )
    position = extract_parser.add_mutually_exclusive_group()
    position.add_argument("--offset", type=int, help="Character offset to start from")
    position.add_argument("--line", type=int, help="1-based line number to start from")

    args = parser.parse_args()
    settings = load_settings()

    if args.command == "serve":
        serve(settings, args.transport)
    elif args.command == "init":
        init(settings)
    elif args.command == "info":
        info(settings)
    elif args.command == "list":
        list_documents(settings, args.topic, args.limit, args.offset)
    elif args.command == "search":
        search(settings, args.query, args.topic, args.limit)
    elif args.command == "extract":
        extract(settings, args.id, args.max_chars, args.offset, args.line)


if __name__ == "__main__":
    main()
