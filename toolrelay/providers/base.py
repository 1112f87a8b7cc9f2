"""Base interfaces for model providers and chat sessions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .response import ModelReply

if TYPE_CHECKING:
    from ..tools.catalog import ToolCatalog


@dataclass
class ProviderConfig:
    """Configuration for a provider."""
    api_key: str
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None


class ChatSession(ABC):
    """A multi-turn conversation with tools registered at creation."""

    @abstractmethod
    async def send_message(self, text: str) -> ModelReply:
        """Send a user message and return the model's reply.

        The message and reply become part of the session history only when
        the call succeeds.
        """


class BaseProvider(ABC):
    """Abstract base class for model providers."""

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = self.__class__.__name__

    @abstractmethod
    def start_chat(self, system_instruction: str, catalog: "ToolCatalog") -> ChatSession:
        """Open a chat session with a fixed system instruction and tool catalog."""

    async def aclose(self) -> None:
        """Release transport resources."""
