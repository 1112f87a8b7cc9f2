"""Exception hierarchy for ToolRelay.

Lower layers wrap transport failures in these types so the REPL and CLI can
report them without knowing about httpx or the MCP SDK.
"""


class ToolRelayError(Exception):
    """Base class for all ToolRelay errors."""


class ConfigurationError(ToolRelayError):
    """Missing or invalid configuration, such as an unset API key."""


class ToolServerConnectionError(ToolRelayError):
    """A tool server could not be launched, initialized, or listed."""


class ClientStateError(ToolRelayError):
    """An operation was attempted in a state that does not allow it."""


class InvocationError(ToolRelayError):
    """A model or tool call failed while processing a query."""


class ModelInvocationError(InvocationError):
    """The model session request failed or returned an unusable response."""


class ToolInvocationError(InvocationError):
    """A tool call could not be routed or the tool server call failed."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Tool {tool_name}: {message}")
        self.tool_name = tool_name


class ToolResultError(InvocationError):
    """A tool result did not have the expected text content shape."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Unexpected result from tool {tool_name}: {message}")
        self.tool_name = tool_name
