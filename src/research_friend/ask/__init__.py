"""Ask mode: LLM processing of whole or chunked documents."""

from research_friend.ask.processor import (
    ChunkInfo,
    extract_response_text,
    process_ask,
    process_single_chunk,
    synthesize_results,
)

__all__ = [
    "ChunkInfo",
    "extract_response_text",
    "process_ask",
    "process_single_chunk",
    "synthesize_results",
]
