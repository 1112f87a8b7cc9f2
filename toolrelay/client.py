"""Conversation client: a Gemini chat session wired to MCP tool servers.

Each query goes to the chat session; every function call the model asks for
is run on the tool server that declared it, and the tool's text output is
fed back into the same session before the next call is handled.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from .errors import (
    ClientStateError,
    ConfigurationError,
    ToolInvocationError,
    ToolRelayError,
    ToolServerConnectionError,
)
from .prompts import build_system_prompt
from .providers.base import BaseProvider, ChatSession, ProviderConfig
from .providers.gemini import GeminiProvider
from .providers.response import FunctionCall, ModelReply
from .servers.base import ToolProvider
from .servers.stdio import ServerEndpoint, StdioToolServer
from .tools.catalog import ToolCatalog, build_catalog
from .tools.schema import DEFAULT_MAX_DEPTH

_log = logging.getLogger(__name__)

TOOL_CALL_LINE = "[Calling tool {name} with args {args}]"
TOOL_RESULT_MESSAGE = "Using the following information, answer the original query: {result}"

ServerConnector = Callable[[ServerEndpoint], Awaitable[ToolProvider]]


class ClientState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    PROCESSING = "processing"
    CLOSED = "closed"


@dataclass
class _Connection:
    """Everything created by ``connect``: chat, servers, catalog, routing."""

    chat: ChatSession
    catalog: ToolCatalog
    servers: list[ToolProvider] = field(default_factory=list)
    routes: dict[str, ToolProvider] = field(default_factory=dict)


async def connect_stdio_server(endpoint: ServerEndpoint) -> ToolProvider:
    server = StdioToolServer(endpoint)
    await server.connect()
    return server


class ConversationClient:
    """Owns the chat session and the tool server connections.

    States: DISCONNECTED -> CONNECTED (after ``connect``) -> PROCESSING while a
    query runs -> back to CONNECTED; ``close`` moves to CLOSED from anywhere.
    """

    def __init__(
        self,
        config: ProviderConfig,
        system_prompt: Optional[str] = None,
        propagate_required: bool = False,
        max_schema_depth: int = DEFAULT_MAX_DEPTH,
        provider_factory: Callable[[ProviderConfig], BaseProvider] = GeminiProvider,
        server_connector: ServerConnector = connect_stdio_server,
    ):
        if not config.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")
        self.config = config
        self.system_prompt = build_system_prompt(system_prompt)
        self.propagate_required = propagate_required
        self.max_schema_depth = max_schema_depth
        self.provider = provider_factory(config)
        self._connect_server = server_connector
        self._connection: Optional[_Connection] = None
        self._last_reply: Optional[ModelReply] = None
        self.state = ClientState.DISCONNECTED

    @property
    def catalog(self) -> ToolCatalog:
        return self._connection.catalog if self._connection else ToolCatalog()

    @property
    def last_usage(self) -> Optional[tuple[int, int]]:
        """Token usage from the last model reply: (input_tokens, output_tokens)."""
        if self._last_reply is None:
            return None
        return self._last_reply.input_tokens, self._last_reply.output_tokens

    async def connect(self, endpoint: ServerEndpoint) -> ToolCatalog:
        """Connect a tool server, build its catalog, and (re)start the chat.

        Calling this for several endpoints merges their tools; the chat
        session is recreated with the merged catalog each time.

        Returns:
            The catalog contributed by this endpoint alone.

        Raises:
            ToolServerConnectionError: If the server cannot be started or its
                tools cannot be listed.
        """
        if self.state in (ClientState.CLOSED, ClientState.PROCESSING):
            raise ClientStateError(f"Cannot connect while {self.state.value}")

        try:
            server = await self._connect_server(endpoint)
        except ToolServerConnectionError:
            raise
        except Exception as exc:
            raise ToolServerConnectionError(
                f"Failed to connect to tool server {endpoint.name}: {exc}"
            ) from exc

        try:
            catalog = await build_catalog(
                server,
                propagate_required=self.propagate_required,
                max_depth=self.max_schema_depth,
            )
        except Exception as exc:
            await server.close()
            raise ToolServerConnectionError(
                f"Failed to list tools from {endpoint.name}: {exc}"
            ) from exc

        previous = self._connection
        servers = (previous.servers if previous else []) + [server]
        routes = dict(previous.routes) if previous else {}
        for name in catalog.names:
            routes.setdefault(name, server)
        merged = previous.catalog.merge(catalog) if previous else catalog

        chat = self.provider.start_chat(self.system_prompt, merged)
        self._connection = _Connection(chat=chat, catalog=merged, servers=servers, routes=routes)
        self.state = ClientState.CONNECTED
        _log.info("Connected to %s with tools: %s", endpoint.name, catalog.names)
        return catalog

    async def process_query(self, query: str) -> str:
        """Run one turn and return the accumulated output lines.

        Tool calls run strictly one after another: call, inject the result,
        read the follow-up reply, then the next call. Any failure propagates
        and the partial output is discarded.
        """
        connection = self._require_connected()
        self.state = ClientState.PROCESSING
        try:
            reply = await self._send(connection, query)
            output = [reply.text]
            for call in reply.function_calls:
                result_text = await self._call_tool(connection, call)
                args = json.dumps(call.args, separators=(",", ":"))
                output.append(TOOL_CALL_LINE.format(name=call.name, args=args))
                follow_up = await self._send(
                    connection, TOOL_RESULT_MESSAGE.format(result=result_text),
                )
                if follow_up.function_calls:
                    _log.debug(
                        "Follow-up reply requested %d more tool calls; not executed",
                        len(follow_up.function_calls),
                    )
                output.append(follow_up.text)
            return "\n".join(output)
        finally:
            if self.state is ClientState.PROCESSING:
                self.state = ClientState.CONNECTED

    async def close(self) -> None:
        """Close every tool server (last connected first) and the model client."""
        if self.state is ClientState.CLOSED:
            return
        self.state = ClientState.CLOSED
        connection, self._connection = self._connection, None
        for server in reversed(connection.servers if connection else []):
            try:
                await server.close()
            except Exception:
                _log.exception("Error closing tool server %s", getattr(server, "name", server))
        await self.provider.aclose()

    async def __aenter__(self) -> "ConversationClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _require_connected(self) -> _Connection:
        if self.state is not ClientState.CONNECTED or self._connection is None:
            raise ClientStateError(f"Cannot process a query while {self.state.value}")
        return self._connection

    async def _send(self, connection: _Connection, text: str) -> ModelReply:
        reply = await connection.chat.send_message(text)
        self._last_reply = reply
        return reply

    async def _call_tool(self, connection: _Connection, call: FunctionCall) -> str:
        server = connection.routes.get(call.name)
        if server is None:
            raise ToolInvocationError(call.name, "no connected server provides this tool")

        _log.info("Calling tool %s with args %s", call.name, call.args)
        try:
            result = await server.call_tool(call.name, call.args)
        except ToolRelayError:
            raise
        except Exception as exc:
            raise ToolInvocationError(call.name, str(exc)) from exc

        if result.is_error:
            _log.warning("Tool %s reported an error result", call.name)
        return result.first_text(call.name)
