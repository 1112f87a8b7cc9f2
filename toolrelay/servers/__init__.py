"""Tool server connections."""

from .base import ToolProvider, ToolResult
from .stdio import ServerEndpoint, StdioToolServer

__all__ = [
    "ToolProvider",
    "ToolResult",
    "ServerEndpoint",
    "StdioToolServer",
]
