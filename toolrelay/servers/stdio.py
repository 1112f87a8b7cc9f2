"""MCP tool servers launched as subprocesses over stdio."""

import logging
import sys
from contextlib import AsyncExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.types import Implementation

from .. import __version__
from ..errors import ConfigurationError, ToolInvocationError, ToolServerConnectionError
from ..tools.types import ToolDescription
from .base import ToolResult

_log = logging.getLogger(__name__)

CLIENT_INFO = Implementation(name="toolrelay", version=__version__)


@dataclass(frozen=True)
class ServerEndpoint:
    """How to launch one tool server."""

    name: str
    command: str
    args: tuple[str, ...] = ()
    env: Optional[dict[str, str]] = None
    cwd: Optional[str] = None

    @classmethod
    def from_script_path(cls, path: str) -> "ServerEndpoint":
        """Pick an interpreter from the script suffix (.py or .js)."""
        script = Path(path)
        if script.suffix == ".py":
            command = "python" if sys.platform == "win32" else "python3"
        elif script.suffix == ".js":
            command = "node"
        else:
            raise ConfigurationError(f"Server script must be a .js or .py file: {path}")
        return cls(name=script.stem, command=command, args=(str(script),))

    @classmethod
    def from_config(cls, entry: Union[str, dict]) -> "ServerEndpoint":
        """Accept a script path or a ``{command, args, env, cwd, name}`` mapping."""
        if isinstance(entry, str):
            return cls.from_script_path(entry)
        if isinstance(entry, dict):
            if "path" in entry:
                return cls.from_script_path(entry["path"])
            command = entry.get("command")
            if not command:
                raise ConfigurationError(f"Server entry needs 'path' or 'command': {entry}")
            return cls(
                name=entry.get("name") or Path(command).stem,
                command=command,
                args=tuple(str(a) for a in entry.get("args", [])),
                env=entry.get("env"),
                cwd=entry.get("cwd"),
            )
        raise ConfigurationError(f"Invalid server entry: {entry!r}")


class StdioToolServer:
    """A connected MCP server session.

    Must be connected, used, and closed from the same task; the MCP client
    opens cancel scopes that are bound to the task that entered them.
    """

    def __init__(self, endpoint: ServerEndpoint):
        self.endpoint = endpoint
        self.name = endpoint.name
        self._stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None

    async def connect(self) -> None:
        """Launch the subprocess and run the MCP initialize handshake."""
        params = StdioServerParameters(
            command=self.endpoint.command,
            args=list(self.endpoint.args),
            env=self.endpoint.env,
            cwd=self.endpoint.cwd,
        )
        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(stdio_client(params))
            session = await stack.enter_async_context(
                ClientSession(read_stream, write_stream, client_info=CLIENT_INFO)
            )
            await session.initialize()
        except Exception as exc:
            await stack.aclose()
            raise ToolServerConnectionError(
                f"Failed to start tool server {self.name} "
                f"({self.endpoint.command} {' '.join(self.endpoint.args)}): {exc}"
            ) from exc

        self._stack = stack
        self._session = session
        _log.info("Connected to tool server %s", self.name)

    async def list_tools(self) -> list[ToolDescription]:
        result = await self._require_session().list_tools()
        return [ToolDescription.from_mcp(tool) for tool in result.tools]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        session = self._require_session()
        try:
            result = await session.call_tool(name, arguments)
        except Exception as exc:
            raise ToolInvocationError(name, f"call failed on server {self.name}: {exc}") from exc
        return ToolResult(content=list(result.content or []), is_error=bool(result.isError))

    async def close(self) -> None:
        stack, self._stack, self._session = self._stack, None, None
        if stack is not None:
            await stack.aclose()
            _log.info("Closed tool server %s", self.name)

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise ToolServerConnectionError(f"Tool server {self.name} is not connected")
        return self._session
