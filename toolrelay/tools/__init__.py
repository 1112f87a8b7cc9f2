"""Tool schema translation and catalog building.

Converts the JSON Schema parameters advertised by tool servers into Gemini
function declarations.
"""

from .types import NodeKind, TypeNode, ToolDescription, parse_json_schema, parse_parameters
from .schema import SchemaKind, TargetSchema, ToolDeclaration, translate, unwrap
from .catalog import ToolCatalog, build_catalog, declare_tool

__all__ = [
    "NodeKind",
    "TypeNode",
    "ToolDescription",
    "parse_json_schema",
    "parse_parameters",
    "SchemaKind",
    "TargetSchema",
    "ToolDeclaration",
    "translate",
    "unwrap",
    "ToolCatalog",
    "build_catalog",
    "declare_tool",
]
