"""Source-side parameter type descriptions.

Tool servers describe their parameters with JSON Schema. This module turns
that schema into a closed sum type, ``TypeNode``, so the translator can
unwrap modifiers and switch on a single base-kind tag instead of probing
dictionary keys all over the place.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional

_log = logging.getLogger(__name__)


class NodeKind(str, Enum):
    """Tag for every ``TypeNode`` variant."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"
    OPTIONAL = "optional"
    NULLABLE = "nullable"
    DEFAULT = "default"
    UNKNOWN = "unknown"


MODIFIER_KINDS = frozenset({NodeKind.OPTIONAL, NodeKind.NULLABLE, NodeKind.DEFAULT})


@dataclass(frozen=True)
class TypeNode:
    """One node of a parameter type description.

    Only the fields relevant to ``kind`` are populated:

    - NUMBER: ``is_integer``
    - ENUM: ``values``
    - ARRAY: ``element``
    - OBJECT: ``fields``
    - OPTIONAL / NULLABLE / DEFAULT: ``inner`` (and ``default`` for DEFAULT)
    - UNKNOWN: ``raw`` holds the schema fragment that could not be classified
    """

    kind: NodeKind
    description: Optional[str] = None
    is_integer: bool = False
    values: tuple[str, ...] = ()
    element: Optional["TypeNode"] = None
    fields: Mapping[str, "TypeNode"] = field(default_factory=dict)
    inner: Optional["TypeNode"] = None
    default: Any = None
    raw: Any = None

    @property
    def is_modifier(self) -> bool:
        return self.kind in MODIFIER_KINDS

    # Constructors, one per variant.

    @classmethod
    def string(cls, description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.STRING, description=description)

    @classmethod
    def number(cls, is_integer: bool = False, description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.NUMBER, description=description, is_integer=is_integer)

    @classmethod
    def boolean(cls, description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.BOOLEAN, description=description)

    @classmethod
    def enum(cls, values, description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.ENUM, description=description, values=tuple(values))

    @classmethod
    def array(cls, element: "TypeNode", description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.ARRAY, description=description, element=element)

    @classmethod
    def object(cls, fields: Mapping[str, "TypeNode"], description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.OBJECT, description=description, fields=dict(fields))

    @classmethod
    def optional(cls, inner: "TypeNode", description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.OPTIONAL, description=description, inner=inner)

    @classmethod
    def nullable(cls, inner: "TypeNode", description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.NULLABLE, description=description, inner=inner)

    @classmethod
    def with_default(cls, inner: "TypeNode", default: Any, description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.DEFAULT, description=description, inner=inner, default=default)

    @classmethod
    def unknown(cls, raw: Any = None, description: Optional[str] = None) -> "TypeNode":
        return cls(NodeKind.UNKNOWN, description=description, raw=raw)


@dataclass(frozen=True)
class ToolDescription:
    """A tool as advertised by a tool server."""

    name: str
    description: str
    parameters: Mapping[str, TypeNode] = field(default_factory=dict)

    @classmethod
    def from_mcp(cls, tool: Any) -> "ToolDescription":
        """Build from an MCP ``Tool`` (anything with name, description, inputSchema)."""
        schema = getattr(tool, "inputSchema", None) or {}
        return cls(
            name=tool.name,
            description=getattr(tool, "description", None) or "",
            parameters=parse_parameters(schema),
        )


def parse_parameters(schema: Mapping[str, Any]) -> dict[str, TypeNode]:
    """Parse a top-level ``object`` schema into a parameter-name -> node map."""
    if not isinstance(schema, Mapping):
        return {}
    return _parse_properties(schema)


def parse_json_schema(schema: Any) -> TypeNode:
    """Convert one JSON Schema fragment into a ``TypeNode``.

    Unsupported constructs (``$ref``, multi-branch unions, missing ``type``)
    become UNKNOWN nodes rather than errors.
    """
    if not isinstance(schema, Mapping):
        return TypeNode.unknown(raw=schema)

    if "default" in schema:
        rest = {k: v for k, v in schema.items() if k != "default"}
        return TypeNode.with_default(parse_json_schema(rest), schema["default"])

    description = schema.get("description")

    if "enum" in schema:
        values = [
            v if isinstance(v, str) else json.dumps(v)
            for v in schema["enum"] if v is not None
        ]
        node = TypeNode.enum(values, description=description)
        if None in schema["enum"]:
            return TypeNode.nullable(node)
        return node

    for union_key in ("anyOf", "oneOf"):
        if union_key in schema:
            return _parse_union(schema, union_key, description)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != "null"]
        if len(non_null) != 1:
            return TypeNode.unknown(raw=dict(schema), description=description)
        inner = parse_json_schema({**schema, "type": non_null[0]})
        if len(non_null) < len(schema_type):
            return TypeNode.nullable(inner)
        return inner

    if schema_type == "string":
        return TypeNode.string(description=description)
    if schema_type == "integer":
        return TypeNode.number(is_integer=True, description=description)
    if schema_type == "number":
        return TypeNode.number(description=description)
    if schema_type == "boolean":
        return TypeNode.boolean(description=description)
    if schema_type == "array":
        return TypeNode.array(parse_json_schema(schema.get("items", {})), description=description)
    if schema_type == "object" or (schema_type is None and "properties" in schema):
        return TypeNode.object(_parse_properties(schema), description=description)

    return TypeNode.unknown(raw=dict(schema), description=description)


def _parse_union(schema: Mapping[str, Any], union_key: str, description: Optional[str]) -> TypeNode:
    """Handle ``anyOf``/``oneOf``: only ``X | null`` maps onto the sum type."""
    branches = schema[union_key] or []
    non_null = [b for b in branches if not (isinstance(b, Mapping) and b.get("type") == "null")]
    if len(non_null) != 1:
        _log.debug("Unsupported %s with %d branches", union_key, len(non_null))
        return TypeNode.unknown(raw=dict(schema), description=description)

    inner = parse_json_schema(non_null[0])
    if description and inner.description is None and not inner.is_modifier:
        inner = replace(inner, description=description)
    if len(non_null) < len(branches):
        return TypeNode.nullable(inner)
    return inner


def _parse_properties(schema: Mapping[str, Any]) -> dict[str, TypeNode]:
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        properties = {}
    required = schema.get("required")
    required = set(required) if isinstance(required, list) else set()
    fields = {}
    for name, prop in properties.items():
        node = parse_json_schema(prop)
        if name not in required:
            node = TypeNode.optional(node)
        fields[name] = node
    return fields
