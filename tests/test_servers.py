"""Tests for tool server endpoints, result extraction and the stdio server."""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from mcp.types import ImageContent, TextContent

from toolrelay.errors import (
    ConfigurationError,
    ToolInvocationError,
    ToolResultError,
    ToolServerConnectionError,
)
from toolrelay.servers.base import ToolResult
from toolrelay.servers.stdio import ServerEndpoint, StdioToolServer
from toolrelay.tools.types import NodeKind


class TestServerEndpoint:

    def test_python_script(self):
        with patch("toolrelay.servers.stdio.sys.platform", "linux"):
            endpoint = ServerEndpoint.from_script_path("/srv/weather.py")
        assert endpoint.command == "python3"
        assert endpoint.args == ("/srv/weather.py",)
        assert endpoint.name == "weather"

    def test_python_script_on_windows(self):
        with patch("toolrelay.servers.stdio.sys.platform", "win32"):
            endpoint = ServerEndpoint.from_script_path("C:/srv/weather.py")
        assert endpoint.command == "python"

    def test_js_script(self):
        endpoint = ServerEndpoint.from_script_path("/git/kaggle/build/index.js")
        assert endpoint.command == "node"
        assert endpoint.args == ("/git/kaggle/build/index.js",)

    def test_other_suffix_rejected(self):
        with pytest.raises(ConfigurationError, match=".js or .py"):
            ServerEndpoint.from_script_path("/srv/server.sh")

    def test_from_config_string(self):
        assert ServerEndpoint.from_config("/a/b.js").command == "node"

    def test_from_config_path_mapping(self):
        assert ServerEndpoint.from_config({"path": "/a/b.py"}).name == "b"

    def test_from_config_command_mapping(self):
        endpoint = ServerEndpoint.from_config({
            "command": "uvx",
            "args": ["kaggle-mcp", 3],
            "env": {"TOKEN": "x"},
        })
        assert endpoint.name == "uvx"
        assert endpoint.args == ("kaggle-mcp", "3")
        assert endpoint.env == {"TOKEN": "x"}

    def test_from_config_missing_command(self):
        with pytest.raises(ConfigurationError):
            ServerEndpoint.from_config({"args": []})

    def test_from_config_bad_type(self):
        with pytest.raises(ConfigurationError):
            ServerEndpoint.from_config(42)


class TestToolResult:

    def test_text_content_object(self):
        result = ToolResult(content=[TextContent(type="text", text="hello")])
        assert result.first_text("t") == "hello"

    def test_dict_content(self):
        assert ToolResult(content=[{"type": "text", "text": "hi"}]).first_text("t") == "hi"

    def test_only_first_item_used(self):
        result = ToolResult(content=[
            TextContent(type="text", text="first"),
            TextContent(type="text", text="second"),
        ])
        assert result.first_text("t") == "first"

    def test_empty_content(self):
        with pytest.raises(ToolResultError, match="Unexpected result from tool t: result has no content"):
            ToolResult(content=[]).first_text("t")

    def test_non_text_first_item(self):
        result = ToolResult(content=[ImageContent(type="image", data="AAAA", mimeType="image/png")])
        with pytest.raises(ToolResultError, match="image"):
            result.first_text("t")


def _server_with_session(session):
    server = StdioToolServer(ServerEndpoint(name="fake", command="node", args=("x.js",)))
    server._session = session
    return server


class TestStdioToolServer:

    @pytest.mark.asyncio
    async def test_list_tools_parses_schemas(self):
        session = AsyncMock()
        session.list_tools.return_value = SimpleNamespace(tools=[
            SimpleNamespace(
                name="get_dataset_metadata",
                description="Fetch metadata",
                inputSchema={
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                    "required": ["name"],
                },
            ),
        ])
        server = _server_with_session(session)

        tools = await server.list_tools()

        assert [t.name for t in tools] == ["get_dataset_metadata"]
        assert tools[0].parameters["name"].kind is NodeKind.STRING

    @pytest.mark.asyncio
    async def test_call_tool_wraps_result(self):
        session = AsyncMock()
        session.call_tool.return_value = SimpleNamespace(
            content=[TextContent(type="text", text="ok")], isError=False,
        )
        server = _server_with_session(session)

        result = await server.call_tool("echo", {"message": "hi"})

        session.call_tool.assert_awaited_once_with("echo", {"message": "hi"})
        assert result.first_text("echo") == "ok"
        assert result.is_error is False

    @pytest.mark.asyncio
    async def test_call_tool_failure(self):
        session = AsyncMock()
        session.call_tool.side_effect = RuntimeError("pipe closed")
        server = _server_with_session(session)

        with pytest.raises(ToolInvocationError, match="pipe closed"):
            await server.call_tool("echo", {})

    @pytest.mark.asyncio
    async def test_not_connected(self):
        server = StdioToolServer(ServerEndpoint(name="fake", command="node"))
        assert server._session is None
        with pytest.raises(ToolServerConnectionError, match="not connected"):
            await server.list_tools()

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        @asynccontextmanager
        async def failing_stdio_client(params):
            raise FileNotFoundError("node: not found")
            yield

        server = StdioToolServer(ServerEndpoint(name="fake", command="node", args=("x.js",)))
        with patch("toolrelay.servers.stdio.stdio_client", failing_stdio_client):
            with pytest.raises(ToolServerConnectionError, match="node: not found"):
                await server.connect()
        assert server._session is None

    @pytest.mark.asyncio
    async def test_close_without_connect(self):
        server = StdioToolServer(ServerEndpoint(name="fake", command="node"))
        await server.close()
        assert server._session is None
