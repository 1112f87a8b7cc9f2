"""Output rendering for chat responses, tool catalogs, and errors."""

import json

from rich.table import Table
from rich.text import Text

from ..tools.catalog import ToolCatalog
from .theme import PALETTE, console


def render_response(text: str) -> None:
    """Render a turn's output, highlighting the tool-call lines."""
    console.print()
    for line in text.split("\n"):
        if line.startswith("[Calling tool ") and line.endswith("]"):
            console.print(Text(line, style=f"dim {PALETTE.tool}"))
        else:
            console.print(Text(line, style=PALETTE.text_bright))


def render_error(text: str) -> None:
    """Render an error message."""
    err = Text()
    err.append("err ", style=f"bold {PALETTE.error}")
    err.append("| ", style=f"dim {PALETTE.text_muted}")
    err.append(text, style=PALETTE.error)
    console.print(err)


def render_connected(server_name: str, catalog: ToolCatalog) -> None:
    """Announce a connected server and the tools it contributed."""
    line = Text()
    line.append("Connected to server ", style=f"dim {PALETTE.text}")
    line.append(server_name, style=f"bold {PALETTE.info}")
    line.append(" with tools: ", style=f"dim {PALETTE.text}")
    line.append(", ".join(catalog.names) or "(none)", style=PALETTE.tool)
    console.print(line)


def render_catalog(catalog: ToolCatalog, as_json: bool = False) -> None:
    """Show translated tool declarations as a table or as raw JSON."""
    if as_json:
        console.print_json(json.dumps(catalog.function_declarations()))
        return

    table = Table(show_header=True, header_style=f"bold {PALETTE.accent}", box=None)
    table.add_column("tool", style=f"bold {PALETTE.tool}")
    table.add_column("parameters", style=PALETTE.text)
    table.add_column("description", style=f"dim {PALETTE.text}")
    for decl in catalog:
        params = []
        for name, prop in (decl.parameters.properties or {}).items():
            marker = "*" if name in decl.parameters.required else ""
            suffix = " (fallback)" if prop.fallback else ""
            params.append(f"{name}{marker}: {prop.kind.value}{suffix}")
        table.add_row(decl.name, "\n".join(params) or "-", decl.description)
    console.print(table)
