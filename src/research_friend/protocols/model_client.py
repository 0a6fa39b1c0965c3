"""Protocol for language-model call capabilities."""

from typing import Protocol, runtime_checkable

from research_friend.models import ModelReply


@runtime_checkable
class ModelClient(Protocol):
    """Protocol for issuing one model completion call.

    The MCP server implements this over client sampling; tests use
    in-memory fakes. Implementations must not retry internally.
    """

    async def create_message(
        self,
        *,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        timeout_ms: int,
    ) -> ModelReply:
        """Send one user prompt with a system prompt and return the raw reply.

        Raises on timeout or transport failure.
        """
        ...
