"""Tool provider interface shared by real servers and test fakes."""

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from ..errors import ToolResultError
from ..tools.types import ToolDescription


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a single tool call."""

    content: Sequence[Any]
    is_error: bool = False

    def first_text(self, tool_name: str) -> str:
        """Return the text payload of the first content item.

        Raises:
            ToolResultError: If the content list is empty or its first item
                carries no text.
        """
        if not self.content:
            raise ToolResultError(tool_name, "result has no content")

        first = self.content[0]
        text = first.get("text") if isinstance(first, dict) else getattr(first, "text", None)
        if not isinstance(text, str):
            kind = first.get("type") if isinstance(first, dict) else getattr(first, "type", None)
            raise ToolResultError(
                tool_name,
                f"first content item is {kind or type(first).__name__!s}, not text",
            )
        return text


class ToolProvider(Protocol):
    """Anything that can list and call tools."""

    name: str

    async def list_tools(self) -> list[ToolDescription]:
        ...

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        ...

    async def close(self) -> None:
        ...
