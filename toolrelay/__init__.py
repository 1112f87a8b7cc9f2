"""ToolRelay - Gemini chat sessions with tools from MCP servers."""

__version__ = "0.1.0"

from .client import ConversationClient, ClientState
from .config import ConfigManager
from .errors import (
    ToolRelayError,
    ConfigurationError,
    ToolServerConnectionError,
    InvocationError,
)

__all__ = [
    "ConversationClient",
    "ClientState",
    "ConfigManager",
    "ToolRelayError",
    "ConfigurationError",
    "ToolServerConnectionError",
    "InvocationError",
]
