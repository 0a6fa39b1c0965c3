"""Ask mode: answer an instruction about a document with one or more model calls.

Small documents go to the model in one call. Documents above the input
budget are either rejected or, when splitting is enabled, cut into
overlapping chunks that are processed one after another and merged by a
final synthesis call.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from research_friend.ask import prompts
from research_friend.chunkers import compute_chunks, estimate_tokens
from research_friend.config import AskOptions
from research_friend.errors import (
    DocumentTooLargeError,
    HardLimitExceededError,
    MissingCapabilityError,
    NoStructuredResponseError,
)
from research_friend.models import Answer, AskResult, Chunk
from research_friend.protocols import ModelClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkInfo:
    """Position of a chunk within its document (1-based)."""

    current: int
    total: int

    @classmethod
    def of(cls, chunk: Chunk) -> "ChunkInfo":
        return cls(current=chunk.ordinal, total=chunk.total)


def _block_field(block: Any, name: str) -> Any:
    if isinstance(block, Mapping):
        return block.get(name)
    return getattr(block, name, None)


def extract_response_text(content: Any) -> str:
    """Normalize a model reply body to plain text.

    Accepts a string, a list of content blocks (non-text blocks are
    dropped, text blocks joined by newlines) or a single block. A single
    non-text block is serialized to JSON.

    Raises:
        NoStructuredResponseError: If the reply has no content at all
    """
    if content is None:
        raise NoStructuredResponseError("Model reply contained no content")
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        return "\n".join(
            _block_field(block, "text") or ""
            for block in content
            if _block_field(block, "type") == "text"
        )
    if _block_field(content, "type") == "text":
        return _block_field(content, "text") or ""
    if hasattr(content, "model_dump_json"):
        return content.model_dump_json()
    return json.dumps(content, default=str)


async def process_single_chunk(
    text: str,
    ask: str,
    model_client: ModelClient,
    *,
    document_type: str,
    max_output_tokens: int,
    timeout_ms: int,
    chunk_info: Optional[ChunkInfo] = None,
) -> Answer:
    """Run one model call over a whole document or one chunk of it.

    Args:
        text: Document text or chunk text
        ask: The user's instruction
        model_client: Model-call capability
        document_type: Label used in the prompt framing ("PDF document", ...)
        max_output_tokens: Output token budget
        timeout_ms: Per-call timeout
        chunk_info: Set when ``text`` is only part of the document

    Returns:
        Answer text and the identifier of the model that produced it
    """
    if chunk_info is not None:
        system_prompt = prompts.CHUNK_SYSTEM.format(
            document_type=document_type,
            current=chunk_info.current,
            total=chunk_info.total,
        )
        prompt = prompts.CHUNK_USER.format(
            document_type=document_type,
            current=chunk_info.current,
            total=chunk_info.total,
            text=text,
            ask=ask,
        )
    else:
        system_prompt = prompts.WHOLE_DOCUMENT_SYSTEM.format(document_type=document_type)
        prompt = prompts.WHOLE_DOCUMENT_USER.format(document_type=document_type, text=text, ask=ask)

    reply = await model_client.create_message(
        prompt=prompt,
        system_prompt=system_prompt,
        max_tokens=max_output_tokens,
        timeout_ms=timeout_ms,
    )
    return Answer(text=extract_response_text(reply.content), model=reply.model)


async def synthesize_results(
    chunk_results: list[str],
    ask: str,
    model_client: ModelClient,
    *,
    document_type: str,
    max_output_tokens: int,
    timeout_ms: int,
) -> Answer:
    """Merge per-chunk answers into one answer with a final model call."""
    prompt = prompts.SYNTHESIS_USER.format(
        document_type=document_type,
        count=len(chunk_results),
        responses=prompts.format_part_responses(chunk_results),
        ask=ask,
    )
    reply = await model_client.create_message(
        prompt=prompt,
        system_prompt=prompts.SYNTHESIS_SYSTEM,
        max_tokens=max_output_tokens,
        timeout_ms=timeout_ms,
    )
    return Answer(text=extract_response_text(reply.content), model=reply.model)


async def _process_chunked(
    full_text: str,
    ask: str,
    model_client: ModelClient,
    options: AskOptions,
    document_type: str,
) -> AskResult:
    chunks = compute_chunks(
        full_text,
        options.max_input_tokens,
        options.prompt_overhead_tokens,
        overlap=options.chunk_overlap_chars,
        chars_per_token=options.chars_per_token,
    )
    logger.info(f"Ask: splitting {len(full_text):,} chars into {len(chunks)} chunks")

    # One call at a time, results kept in document order
    chunk_results: list[str] = []
    for chunk in chunks:
        answer = await process_single_chunk(
            chunk.text,
            ask,
            model_client,
            document_type=document_type,
            max_output_tokens=options.max_output_tokens,
            timeout_ms=options.timeout_ms,
            chunk_info=ChunkInfo.of(chunk),
        )
        logger.debug(f"Ask: chunk {chunk.ordinal}/{chunk.total} answered")
        chunk_results.append(answer.text)

    synthesis = await synthesize_results(
        chunk_results,
        ask,
        model_client,
        document_type=document_type,
        max_output_tokens=options.max_output_tokens,
        timeout_ms=options.timeout_ms,
    )
    return AskResult(answer=synthesis.text, model=synthesis.model, chunks_processed=len(chunks))


async def process_ask(
    full_text: str,
    ask: str,
    model_client: Optional[ModelClient],
    options: AskOptions = AskOptions(),
    document_type: str = "document",
) -> AskResult:
    """Answer ``ask`` about ``full_text``.

    Args:
        full_text: The complete document text
        ask: Instruction or question, phrased for the whole document
        model_client: Model-call capability; required
        options: Size limits, budgets and the splitting flag
        document_type: Label used in the prompts

    Returns:
        The answer, the model that produced it and the number of chunks
        processed (1 when the document fit in one call)

    Raises:
        MissingCapabilityError: No model client was supplied
        HardLimitExceededError: The document is above the absolute ceiling
        DocumentTooLargeError: The document needs splitting but it is disabled
    """
    if model_client is None:
        raise MissingCapabilityError("A model client is required for ask mode")

    if len(full_text) > options.hard_limit_chars:
        limit_mb = options.hard_limit_chars / (1024 * 1024)
        raise HardLimitExceededError(
            f"Document exceeds maximum size of {limit_mb:g} MB for ask mode. "
            "Use 'search' to find specific content, or pagination (offset/max_chars) "
            "to read in chunks."
        )

    estimated = estimate_tokens(full_text, options.chars_per_token)
    if estimated > options.max_input_tokens - options.headroom_tokens:
        if not options.split_and_synthesize:
            raise DocumentTooLargeError(
                f"Document too large for ask mode (~{estimated:,} tokens, "
                f"limit is {options.max_input_tokens:,}). "
                "Use 'search' to find specific content, pagination (offset/max_chars) "
                "to read in chunks, or set 'ask_split_and_synthesize: true' for automatic "
                "chunked processing (warning: consumes many tokens)."
            )
        return await _process_chunked(full_text, ask, model_client, options, document_type)

    logger.info(f"Ask: single call for {len(full_text):,} chars (~{estimated:,} tokens)")
    answer = await process_single_chunk(
        full_text,
        ask,
        model_client,
        document_type=document_type,
        max_output_tokens=options.max_output_tokens,
        timeout_ms=options.timeout_ms,
    )
    return AskResult(answer=answer.text, model=answer.model, chunks_processed=1)
