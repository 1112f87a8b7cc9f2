"""Parsed model replies."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FunctionCall:
    """A tool call requested by the model."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelReply:
    """Immutable container for one model turn.

    Holds the concatenated text parts, the requested function calls in the
    order the model returned them, and token usage when reported.
    """

    text: str = ""
    function_calls: tuple[FunctionCall, ...] = ()
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @classmethod
    def from_parts(cls, parts: list[dict], usage: dict) -> "ModelReply":
        text_parts = []
        calls = []
        for part in parts:
            if "text" in part:
                text_parts.append(part["text"])
            elif "functionCall" in part:
                fc = part["functionCall"]
                calls.append(FunctionCall(name=fc["name"], args=dict(fc.get("args") or {})))
        return cls(
            text="".join(text_parts),
            function_calls=tuple(calls),
            input_tokens=usage.get("promptTokenCount", 0),
            output_tokens=usage.get("candidatesTokenCount", 0),
        )
