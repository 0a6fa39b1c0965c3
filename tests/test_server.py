import asyncio
import inspect

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from research_friend.config import Settings
from research_friend.server import SamplingModelClient, create_mcp_server
from research_friend.server.mcp_server import run_tool
from research_friend.server.sampling import TIMEOUT_METADATA_KEY
from research_friend.utils.desktop import open_command
from research_friend.web import fetch_web_page


class FakeResult:
    def __init__(self, content, model):
        self.content = content
        self.model = model


class FakeSession:
    def __init__(self, delay=0.0):
        self.delay = delay
        self.requests = []

    async def create_message(self, messages, *, max_tokens, system_prompt=None, metadata=None):
        self.requests.append(
            {
                "messages": messages,
                "max_tokens": max_tokens,
                "system_prompt": system_prompt,
                "metadata": metadata,
            }
        )
        await asyncio.sleep(self.delay)
        return FakeResult(content={"type": "text", "text": "hi"}, model="client-model")


def test_sampling_client_sends_one_user_message():
    session = FakeSession()
    client = SamplingModelClient(session)

    reply = asyncio.run(
        client.create_message(prompt="Q", system_prompt="S", max_tokens=10, timeout_ms=5000)
    )

    assert reply.model == "client-model"
    request = session.requests[0]
    assert request["messages"][0].role == "user"
    assert request["messages"][0].content.text == "Q"
    assert request["system_prompt"] == "S"
    assert request["metadata"] == {TIMEOUT_METADATA_KEY: 5000}


def test_sampling_client_times_out():
    client = SamplingModelClient(FakeSession(delay=1.0))
    with pytest.raises(TimeoutError):
        asyncio.run(
            client.create_message(prompt="Q", system_prompt="S", max_tokens=10, timeout_ms=10)
        )


def test_run_tool_wraps_failures():
    async def failing():
        raise ValueError("boom")

    with pytest.raises(ToolError, match="Error fetching PDF: boom"):
        asyncio.run(run_tool("Error fetching PDF", failing()))


def test_run_tool_returns_json():
    async def ok():
        return {"a": 1}

    assert asyncio.run(run_tool("Error", ok())) == '{\n  "a": 1\n}'


def test_server_registers_tools_and_prompt(tmp_path):
    mcp = create_mcp_server(Settings(stash_root=tmp_path / "stash"))

    tools = {tool.name for tool in asyncio.run(mcp.list_tools())}
    assert tools == {
        "friendly_fetch",
        "friendly_search",
        "friendly_extract",
        "friendly_pdf_extract",
        "stash_process_inbox",
        "stash_open_inbox",
        "stash_search",
        "stash_extract",
        "stash_list",
        "stash_reindex",
    }
    prompts = {prompt.name for prompt in asyncio.run(mcp.list_prompts())}
    assert prompts == {"update-stash"}
    assert (tmp_path / "stash" / "stash.db").exists()
    assert (tmp_path / "stash" / "inbox").is_dir()


def test_fetch_tool_exposes_every_page_fetch_option(tmp_path):
    mcp = create_mcp_server(Settings(stash_root=tmp_path / "stash"))

    tools = {tool.name: tool for tool in asyncio.run(mcp.list_tools())}
    exposed = set(tools["friendly_fetch"].inputSchema["properties"])
    assert exposed == set(inspect.signature(fetch_web_page).parameters)


@pytest.mark.parametrize(
    "platform,command",
    [
        ("darwin", ["open", "/x"]),
        ("win32", ["cmd", "/c", "start", "", "/x"]),
        ("linux", ["xdg-open", "/x"]),
    ],
)
def test_open_command(platform, command):
    assert open_command("/x", platform) == command
