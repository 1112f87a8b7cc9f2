"""Interactive chat loop for ToolRelay."""

import logging
from typing import Callable, Optional

import click

from .client import ConversationClient
from .errors import ToolRelayError
from .ui.output import render_error, render_response
from .ui.theme import PALETTE, console, render_header

_log = logging.getLogger(__name__)

QUIT_COMMAND = "quit"


def prompt_line() -> str:
    """Read one line from the terminal; raises click.Abort on EOF or Ctrl-C."""
    return click.prompt("\nQuery", default="", show_default=False, prompt_suffix=": ")


class ChatREPL:
    """Read queries, hand them to the client, print the answers.

    A failed query is reported and the loop moves on to the next prompt.
    Lines are read on the event loop thread so Ctrl-C at the prompt lands
    in the read itself.
    """

    def __init__(
        self,
        client: ConversationClient,
        read_line: Optional[Callable[[], str]] = None,
    ):
        self.client = client
        self._read_line = read_line or prompt_line
        self.handled = 0
        self.failed = 0

    def welcome(self) -> None:
        render_header("TOOLRELAY", f"Model: {self.client.config.model}")
        console.print(
            f"Tools: {', '.join(self.client.catalog.names) or '(none)'}",
            style=f"dim {PALETTE.text}",
        )
        console.print(f"Type your queries or '{QUIT_COMMAND}' to exit.", style=f"dim {PALETTE.info}")

    async def run(self) -> None:
        self.welcome()
        while True:
            try:
                line = self._read_line()
            except (click.Abort, EOFError, KeyboardInterrupt):
                console.print()
                break

            if line.strip().lower() == QUIT_COMMAND:
                break
            if not line.strip():
                continue

            try:
                response = await self.client.process_query(line)
            except ToolRelayError as e:
                self.failed += 1
                _log.warning("Query failed: %s", e)
                render_error(str(e))
                continue
            except Exception as e:
                self.failed += 1
                _log.exception("Unexpected error while processing query")
                render_error(f"{type(e).__name__}: {e}")
                continue

            self.handled += 1
            render_response(response)
