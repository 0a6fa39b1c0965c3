"""MCP server for research-friend."""

from research_friend.server.mcp_server import create_mcp_server
from research_friend.server.sampling import SamplingModelClient

__all__ = ["SamplingModelClient", "create_mcp_server"]
