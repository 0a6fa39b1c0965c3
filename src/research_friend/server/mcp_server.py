"""FastMCP server implementation for research-friend."""

import json
import logging
from typing import Any, Awaitable, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from research_friend.cache import ContentCache
from research_friend.config import AskOptions, Settings
from research_friend.server.sampling import SamplingModelClient
from research_friend.stash import (
    ask_stash_document,
    extract_from_stash,
    list_stash,
    process_inbox,
    reindex_stash,
    search_in_stash_document,
    search_stash,
)
from research_friend.stash.paths import ensure_stash_dirs, get_inbox_path
from research_friend.storage import StashStore
from research_friend.utils.desktop import open_folder
from research_friend.web import (
    HttpContentSource,
    ask_web,
    extract_from_url,
    fetch_pdf,
    fetch_web_page,
    search_web,
)

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 50
MAX_PAGE_LIMIT = 100

UPDATE_STASH_PROMPT = (
    "Process any documents in my research stash inbox. Use the stash_process_inbox "
    "tool to extract, classify, and store them. Then show me a summary of what was processed."
)


def to_json(result: Any) -> str:
    return json.dumps(result, indent=2, default=str)


async def run_tool(error_prefix: str, operation: Awaitable[Any]) -> str:
    """Await a tool operation and serialize its result.

    Any failure is reported to the client as a ToolError carrying
    ``error_prefix`` and the original message.
    """
    try:
        result = await operation
    except Exception as e:
        logger.warning(f"{error_prefix}: {e}")
        raise ToolError(f"{error_prefix}: {e}") from e
    return to_json(result)


def create_mcp_server(settings: Optional[Settings] = None) -> FastMCP:
    """Create the research-friend MCP server.

    One store, one content cache and one stash root are shared by every
    tool call served by the process.

    Args:
        settings: Runtime settings; defaults are used when omitted

    Returns:
        Configured FastMCP server instance
    """
    settings = settings or Settings()
    mcp = FastMCP(name="research-friend")

    store = StashStore(settings.stash_root)
    store.initialize()
    ensure_stash_dirs(settings.stash_root)
    cache = ContentCache(max_bytes=settings.cache_max_bytes)

    def ask_options(
        ask_timeout: Optional[int],
        ask_max_input_tokens: Optional[int],
        ask_max_output_tokens: Optional[int],
        ask_split_and_synthesize: Optional[bool],
    ) -> AskOptions:
        return settings.ask.with_overrides(
            timeout_ms=ask_timeout,
            max_input_tokens=ask_max_input_tokens,
            max_output_tokens=ask_max_output_tokens,
            split_and_synthesize=ask_split_and_synthesize,
        )

    @mcp.tool()
    async def friendly_fetch(
        url: str,
        output_format: str = "markdown",
        wait_ms: int = 0,
        timeout_ms: int = 15000,
        max_chars: int = 40000,
        include_html: bool = False,
        headless: bool = True,
    ) -> str:
        """Fetch a web page and extract its content as markdown (with links), plain text, or HTML.

        Uses a real browser (Playwright) for JavaScript-heavy sites.

        Args:
            url: The URL to fetch
            output_format: "markdown", "text" or "html" (default: markdown)
            wait_ms: Extra milliseconds to wait after page load (for dynamic content)
            timeout_ms: Maximum time to wait for page load (default: 15000)
            max_chars: Maximum characters to return (default: 40000)
            include_html: Also return the raw HTML (default: false)
            headless: Run browser without UI (default: true)
        """
        return await run_tool(
            "Error fetching page",
            fetch_web_page(
                url,
                wait_ms=wait_ms,
                timeout_ms=timeout_ms,
                max_chars=max_chars,
                include_html=include_html,
                headless=headless,
                output_format=output_format,
            ),
        )

    @mcp.tool()
    async def friendly_search(
        query: str,
        engine: str = "duckduckgo",
        max_results: int = 10,
        timeout_ms: int = 15000,
        headless: bool = True,
    ) -> str:
        """Search the web and get a list of results with titles, URLs, and snippets.

        Args:
            query: The search query
            engine: "duckduckgo", "google" or "bing" (default: duckduckgo)
            max_results: Maximum number of results to return (default: 10, max: 50)
            timeout_ms: Maximum time to wait for results (default: 15000)
            headless: Run browser without UI (default: true)
        """
        if not 1 <= max_results <= MAX_SEARCH_RESULTS:
            raise ToolError(
                f"Error searching: max_results must be between 1 and {MAX_SEARCH_RESULTS}"
            )
        return await run_tool(
            "Error searching",
            search_web(
                query,
                engine=engine,
                max_results=max_results,
                timeout_ms=timeout_ms,
                headless=headless,
            ),
        )

    @mcp.tool()
    async def friendly_extract(
        url: str,
        ctx: Context,
        max_chars: int = 40000,
        offset: int = 0,
        search: Optional[str] = None,
        context_chars: int = 200,
        ask: Optional[str] = None,
        ask_timeout: Optional[int] = None,
        ask_max_input_tokens: Optional[int] = None,
        ask_max_output_tokens: Optional[int] = None,
        ask_split_and_synthesize: Optional[bool] = None,
        wait_ms: int = 0,
        timeout_ms: int = 15000,
        headless: bool = True,
    ) -> str:
        """Extract content from a URL, auto-detecting PDF vs web page.

        Returns paginated text, phrase matches with context, or, with 'ask',
        an LLM answer about the document that keeps it out of your context.

        Args:
            url: The URL to read
            max_chars: Maximum characters to return (default: 40000)
            offset: Character offset to start from (default: 0)
            search: Phrase to search for instead of returning content
            context_chars: Characters of context around each search match (default: 200)
            ask: Request for the LLM, written as if addressing the entire document
            ask_timeout: Timeout in milliseconds for ask mode (default: 300000)
            ask_max_input_tokens: Max estimated input tokens for ask mode (default: 150000)
            ask_max_output_tokens: Max output tokens for ask mode (default: 4096)
            ask_split_and_synthesize: Split documents that exceed the input limit into
                chunks and synthesize the results. Can consume roughly 2x the document
                size in tokens. Max document size: 20 MB. Default: false
            wait_ms: Extra wait after page load (web pages only)
            timeout_ms: Maximum page load time (web pages only)
            headless: Run browser without UI (web pages only)
        """
        source = HttpContentSource(wait_ms=wait_ms, timeout_ms=timeout_ms, headless=headless)
        if ask:
            options = ask_options(
                ask_timeout, ask_max_input_tokens, ask_max_output_tokens, ask_split_and_synthesize
            )
            operation = ask_web(url, ask, source, SamplingModelClient(ctx.session), cache, options)
        else:
            operation = extract_from_url(url, source, cache, max_chars, offset, search, context_chars)
        return await run_tool("Error extracting content", operation)

    @mcp.tool()
    async def friendly_pdf_extract(
        url: str,
        ctx: Context,
        max_chars: int = 40000,
        offset: int = 0,
        search: Optional[str] = None,
        ask: Optional[str] = None,
        ask_timeout: Optional[int] = None,
        ask_max_input_tokens: Optional[int] = None,
        ask_max_output_tokens: Optional[int] = None,
        ask_split_and_synthesize: Optional[bool] = None,
        context_chars: int = 200,
    ) -> str:
        """Fetch a PDF from a URL and extract its text content.

        Returns the text along with metadata like title, author, and page count.
        Use 'ask' to have an LLM answer questions about the PDF without loading it
        into your context.

        Args:
            url: The URL of the PDF to fetch
            max_chars: Maximum characters to return (default: 40000)
            offset: Character offset to start from (default: 0)
            search: Phrase to search for instead of returning content
            ask: Request for the LLM, written as if addressing the entire document
            ask_timeout: Timeout in milliseconds for ask mode (default: 300000)
            ask_max_input_tokens: Max estimated input tokens for ask mode (default: 150000)
            ask_max_output_tokens: Max output tokens for ask mode (default: 4096)
            ask_split_and_synthesize: Split documents that exceed the input limit into
                chunks and synthesize the results. Max document size: 20 MB. Default: false
            context_chars: Characters of context around each search match (default: 200)
        """
        return await run_tool(
            "Error fetching PDF",
            fetch_pdf(
                url,
                HttpContentSource(),
                cache,
                max_chars=max_chars,
                offset=offset,
                search=search,
                ask=ask,
                model_client=SamplingModelClient(ctx.session) if ask else None,
                options=ask_options(
                    ask_timeout, ask_max_input_tokens, ask_max_output_tokens, ask_split_and_synthesize
                ),
                context_chars=context_chars,
            ),
        )

    @mcp.tool()
    async def stash_process_inbox(ctx: Context) -> str:
        """Process documents in the stash inbox folder.

        Extracts text, classifies topics using the LLM, and files each
        document in the stash.
        """
        return await run_tool(
            "Error processing inbox",
            process_inbox(
                store,
                settings.stash_root,
                SamplingModelClient(ctx.session),
                settings.classification,
            ),
        )

    @mcp.tool()
    async def stash_open_inbox() -> str:
        """Open the stash inbox folder in your file manager for easier drag-and-drop."""
        inbox = get_inbox_path(settings.stash_root)

        async def open_inbox() -> dict:
            command = await open_folder(inbox)
            return {"opened": True, "inbox_path": str(inbox), "command": command[0], "args": command[1:]}

        return await run_tool("Error opening inbox", open_inbox())

    @mcp.tool()
    async def stash_search(
        query: str,
        topic: Optional[str] = None,
        ids: Optional[list[int]] = None,
        limit: int = 20,
        offset: int = 0,
        context: int = 1,
    ) -> str:
        """Search documents in the stash by content and filename.

        Every word (or quoted phrase) must appear for a document to match.
        Filename matches are listed first.

        Args:
            query: The search query
            topic: Filter results to a specific topic
            ids: Only search these document ids
            limit: Maximum number of results (default: 20, max: 100)
            offset: Number of results to skip (default: 0)
            context: Lines of context around each match (default: 1)
        """
        return await run_tool(
            "Error searching stash",
            search_stash(
                store,
                settings.stash_root,
                query,
                topic=topic,
                ids=ids,
                limit=min(limit, MAX_PAGE_LIMIT),
                offset=offset,
                context=context,
                rg_path=settings.ripgrep_path,
            ),
        )

    @mcp.tool()
    async def stash_extract(
        id: int,
        ctx: Context,
        max_chars: int = 40000,
        offset: Optional[int] = None,
        line: Optional[int] = None,
        search: Optional[str] = None,
        ask: Optional[str] = None,
        ask_timeout: Optional[int] = None,
        ask_max_input_tokens: Optional[int] = None,
        ask_max_output_tokens: Optional[int] = None,
        ask_split_and_synthesize: Optional[bool] = None,
        context_chars: int = 200,
    ) -> str:
        """Retrieve content from a stashed document.

        Supports pagination by offset or line, search within the document,
        and LLM-powered ask mode.

        Args:
            id: The document ID
            max_chars: Maximum characters to return (default: 40000)
            offset: Character offset to start from (default: 0)
            line: 1-based line number to start from (instead of offset)
            search: Phrase to search for instead of returning content
            ask: Request for the LLM, written as if addressing the entire document
            ask_timeout: Timeout in milliseconds for ask mode (default: 300000)
            ask_max_input_tokens: Max estimated input tokens for ask mode (default: 150000)
            ask_max_output_tokens: Max output tokens for ask mode (default: 4096)
            ask_split_and_synthesize: Split documents that exceed the input limit into
                chunks and synthesize the results. Max document size: 20 MB. Default: false
            context_chars: Characters of context around each search match (default: 200)
        """

        async def extract() -> dict:
            if ask:
                options = ask_options(
                    ask_timeout, ask_max_input_tokens, ask_max_output_tokens, ask_split_and_synthesize
                )
                return await ask_stash_document(
                    store, settings.stash_root, id, ask, SamplingModelClient(ctx.session), options
                )
            if search:
                return search_in_stash_document(store, settings.stash_root, id, search, context_chars)
            return extract_from_stash(store, settings.stash_root, id, max_chars, offset, line)

        return await run_tool("Error extracting from stash", extract())

    @mcp.tool()
    async def stash_list(topic: Optional[str] = None, limit: int = 50, offset: int = 0) -> str:
        """List stash topics with document counts and the documents in them.

        Args:
            topic: Topic to list documents for. If omitted, lists all documents.
            limit: Maximum number of documents to return (default: 50, max: 100)
            offset: Number of documents to skip (default: 0)
        """

        async def listing() -> dict:
            return list_stash(store, topic, min(limit, MAX_PAGE_LIMIT), offset)

        return await run_tool("Error listing stash", listing())

    @mcp.tool()
    async def stash_reindex(ctx: Context, ids: Optional[list[int]] = None) -> str:
        """Re-classify stashed documents and move them to their new topics.

        Args:
            ids: Document ids to reindex. If omitted, reindexes every document.
        """
        return await run_tool(
            "Error reindexing stash",
            reindex_stash(
                store,
                settings.stash_root,
                SamplingModelClient(ctx.session),
                ids,
                settings.classification,
            ),
        )

    @mcp.prompt(
        name="update-stash",
        description="Process new documents in the inbox and add them to the research stash.",
    )
    def update_stash() -> str:
        return UPDATE_STASH_PROMPT

    return mcp
