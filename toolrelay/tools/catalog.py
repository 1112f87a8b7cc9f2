"""Build the tool catalog registered with a model session."""

import logging
from typing import Iterable, Iterator, Optional, TYPE_CHECKING

from .schema import (
    DEFAULT_MAX_DEPTH,
    SchemaKind,
    TargetSchema,
    ToolDeclaration,
    is_required,
    translate,
)
from .types import ToolDescription

if TYPE_CHECKING:
    from ..servers.base import ToolProvider

_log = logging.getLogger(__name__)


class ToolCatalog:
    """Immutable, name-unique collection of tool declarations."""

    def __init__(self, declarations: Iterable[ToolDeclaration] = ()):
        by_name: dict[str, ToolDeclaration] = {}
        for decl in declarations:
            if decl.name in by_name:
                _log.warning("Duplicate tool %r ignored", decl.name)
                continue
            by_name[decl.name] = decl
        self._declarations = tuple(by_name.values())
        self._by_name = by_name

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._declarations]

    def get(self, name: str) -> Optional[ToolDeclaration]:
        return self._by_name.get(name)

    def merge(self, other: "ToolCatalog") -> "ToolCatalog":
        """Return a new catalog with ``other``'s tools appended; first name wins."""
        return ToolCatalog(self._declarations + other._declarations)

    def function_declarations(self) -> list[dict]:
        """Declarations in the shape Gemini expects under ``function_declarations``."""
        return [d.to_dict() for d in self._declarations]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ToolDeclaration]:
        return iter(self._declarations)

    def __len__(self) -> int:
        return len(self._declarations)

    def __repr__(self) -> str:
        return f"ToolCatalog({self.names!r})"


def declare_tool(
    tool: ToolDescription,
    propagate_required: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ToolDeclaration:
    """Translate one tool description into a declaration.

    The top level is always an object carrying the tool's own description.
    ``required`` stays empty unless ``propagate_required`` is set, in which
    case it lists every parameter that is neither Optional nor Default.
    """
    properties = {
        name: translate(node, max_depth=max_depth)
        for name, node in tool.parameters.items()
    }
    required: tuple[str, ...] = ()
    if propagate_required:
        required = tuple(name for name, node in tool.parameters.items() if is_required(node))

    parameters = TargetSchema(
        SchemaKind.OBJECT,
        description=tool.description or None,
        properties=properties,
        required=required,
    )
    fallbacks = list(parameters.fallback_paths())
    if fallbacks:
        _log.warning(
            "Tool %s: parameters degraded to string schema: %s",
            tool.name, ", ".join(fallbacks),
        )
    return ToolDeclaration(name=tool.name, description=tool.description, parameters=parameters)


async def build_catalog(
    provider: "ToolProvider",
    propagate_required: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ToolCatalog:
    """List the provider's tools once and translate each into a declaration.

    Provider failures propagate; no partial catalog is returned.
    """
    tools = await provider.list_tools()
    catalog = ToolCatalog(
        declare_tool(tool, propagate_required=propagate_required, max_depth=max_depth)
        for tool in tools
    )
    _log.info("Built catalog with %d tools: %s", len(catalog), catalog.names)
    return catalog
