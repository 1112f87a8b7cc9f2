"""System instruction text."""

from .default import build_system_prompt, DEFAULT_SYSTEM_PROMPT

__all__ = [
    "build_system_prompt",
    "DEFAULT_SYSTEM_PROMPT",
]
