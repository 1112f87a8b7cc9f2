"""Model providers."""

from .base import BaseProvider, ChatSession, ProviderConfig
from .gemini import GeminiChatSession, GeminiProvider
from .response import FunctionCall, ModelReply

__all__ = [
    "BaseProvider",
    "ChatSession",
    "ProviderConfig",
    "GeminiChatSession",
    "GeminiProvider",
    "FunctionCall",
    "ModelReply",
]
