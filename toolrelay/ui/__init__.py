"""Terminal UI components."""

from .theme import PALETTE, console, render_header
from .output import render_catalog, render_connected, render_error, render_response

__all__ = [
    "PALETTE",
    "console",
    "render_header",
    "render_catalog",
    "render_connected",
    "render_error",
    "render_response",
]
