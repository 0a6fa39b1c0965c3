"""Model calls over MCP client sampling."""

import asyncio
import logging

from mcp.server.session import ServerSession
from mcp.types import SamplingMessage, TextContent

from research_friend.models import ModelReply

logger = logging.getLogger(__name__)

TIMEOUT_METADATA_KEY = "research-friend/timeoutMs"


class SamplingModelClient:
    """ModelClient that asks the connected MCP client to run the model.

    Each call is bounded by its own timeout and never retried.
    """

    def __init__(self, session: ServerSession):
        self._session = session

    async def create_message(
        self,
        *,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        timeout_ms: int,
    ) -> ModelReply:
        request = self._session.create_message(
            messages=[
                SamplingMessage(role="user", content=TextContent(type="text", text=prompt))
            ],
            max_tokens=max_tokens,
            system_prompt=system_prompt,
            metadata={TIMEOUT_METADATA_KEY: timeout_ms},
        )
        try:
            result = await asyncio.wait_for(request, timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise TimeoutError(f"Model call timed out after {timeout_ms} ms") from None

        logger.debug(f"Sampling reply from {result.model}")
        return ModelReply(content=result.content, model=result.model)
