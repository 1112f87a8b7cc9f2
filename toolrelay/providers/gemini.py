"""Google Gemini chat sessions over the generateContent REST API."""

import logging
from typing import Optional, TYPE_CHECKING

import httpx

from ..errors import ModelInvocationError
from .base import BaseProvider, ChatSession, ProviderConfig
from .response import ModelReply

if TYPE_CHECKING:
    from ..tools.catalog import ToolCatalog

_log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.0-flash"

# Finish reasons that mean the candidate was withheld, not merely empty.
BLOCKED_FINISH_REASONS = frozenset({
    "SAFETY", "RECITATION", "LANGUAGE", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII",
})


class GeminiProvider(BaseProvider):
    """Google Gemini API provider."""

    def __init__(self, config: ProviderConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        self.base_url = config.base_url or DEFAULT_BASE_URL
        self.client = client or httpx.AsyncClient(timeout=60.0)
        # OAuth tokens (from Gemini CLI) start with "ya29." and use Bearer auth
        # API keys use ?key= query param
        self._use_bearer = config.api_key.startswith("ya29.")

    def _auth_params(self) -> tuple[dict, dict]:
        """Return (headers, params) for authentication."""
        headers = {"Content-Type": "application/json"}
        if self._use_bearer:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
            return headers, {}
        return headers, {"key": self.config.api_key}

    @property
    def generate_url(self) -> str:
        return f"{self.base_url}/{self.config.model}:generateContent"

    def start_chat(self, system_instruction: str, catalog: "ToolCatalog") -> "GeminiChatSession":
        return GeminiChatSession(self, system_instruction, catalog.function_declarations())

    async def aclose(self) -> None:
        await self.client.aclose()


class GeminiChatSession(ChatSession):
    """Conversation state for one Gemini chat.

    ``history`` holds the ``contents`` list sent with every request. Turns are
    only recorded after a successful response.
    """

    def __init__(
        self,
        provider: GeminiProvider,
        system_instruction: str,
        function_declarations: list[dict],
    ):
        self.provider = provider
        self.system_instruction = system_instruction
        self.function_declarations = function_declarations
        self.history: list[dict] = []

    def _payload(self, contents: list[dict]) -> dict:
        config = self.provider.config
        payload = {
            "contents": contents,
            "generationConfig": {
                "temperature": config.temperature,
                "maxOutputTokens": config.max_tokens or 2048,
            },
        }
        if self.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": self.system_instruction}]}
        if self.function_declarations:
            payload["tools"] = [{"function_declarations": self.function_declarations}]
        return payload

    async def send_message(self, text: str) -> ModelReply:
        user_content = {"role": "user", "parts": [{"text": text}]}
        contents = self.history + [user_content]
        headers, params = self.provider._auth_params()

        try:
            response = await self.provider.client.post(
                self.provider.generate_url,
                json=self._payload(contents),
                params=params,
                headers=headers,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise ModelInvocationError(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise ModelInvocationError(f"Gemini returned invalid JSON: {exc}") from exc

        candidates = data.get("candidates") or []
        if not candidates:
            reason = data.get("promptFeedback", {}).get("blockReason", "no candidates")
            raise ModelInvocationError(f"Gemini returned no response: {reason}")

        candidate = candidates[0]
        reason = candidate.get("finishReason")
        if reason in BLOCKED_FINISH_REASONS:
            raise ModelInvocationError(f"Gemini withheld the response: {reason}")
        parts = (candidate.get("content") or {}).get("parts") or []
        if not parts:
            _log.debug("Gemini returned no content parts (finishReason=%s)", reason)

        reply = ModelReply.from_parts(parts, data.get("usageMetadata", {}))
        self.history = contents + [{"role": "model", "parts": parts}]
        _log.debug(
            "Gemini reply: %d chars, %d function calls",
            len(reply.text), len(reply.function_calls),
        )
        return reply
