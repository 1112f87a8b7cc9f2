"""Translate parameter type descriptions into Gemini function-calling schemas.

Gemini's schema has no per-field optional, nullable, or default markers, so
``translate`` unwraps those modifiers and classifies the base kind. Shapes it
cannot express degrade to a string schema flagged with ``fallback=True``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping, Optional

from .types import NodeKind, TypeNode

_log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


class SchemaKind(str, Enum):
    """The six type tags Gemini function declarations accept."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class TargetSchema:
    """A translated schema node.

    ``properties`` is set only for OBJECT, ``items`` only for ARRAY, and
    ``enum`` only for enum-valued STRING nodes (with ``format="enum"``).
    ``fallback`` marks nodes produced by the lossy string fallback; it is not
    part of the serialized schema.
    """

    kind: SchemaKind
    description: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[tuple[str, ...]] = None
    items: Optional["TargetSchema"] = None
    properties: Optional[Mapping[str, "TargetSchema"]] = None
    required: tuple[str, ...] = ()
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the Gemini REST schema shape."""
        out: dict[str, Any] = {"type": self.kind.value}
        if self.description:
            out["description"] = self.description
        if self.format:
            out["format"] = self.format
        if self.enum is not None:
            out["enum"] = list(self.enum)
        if self.kind is SchemaKind.ARRAY and self.items is not None:
            out["items"] = self.items.to_dict()
        if self.kind is SchemaKind.OBJECT:
            out["properties"] = {
                name: prop.to_dict() for name, prop in (self.properties or {}).items()
            }
            if self.required:
                out["required"] = list(self.required)
        return out

    def fallback_paths(self, path: str = "") -> Iterator[str]:
        """Yield dotted paths of every node produced by the string fallback."""
        if self.fallback:
            yield path or "<root>"
        if self.items is not None:
            yield from self.items.fallback_paths(f"{path}[]")
        for name, prop in (self.properties or {}).items():
            yield from prop.fallback_paths(f"{path}.{name}" if path else name)


@dataclass(frozen=True)
class ToolDeclaration:
    """A tool ready to register with the model session."""

    name: str
    description: str
    parameters: TargetSchema = field(
        default_factory=lambda: TargetSchema(SchemaKind.OBJECT, properties={}),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.to_dict(),
        }


def unwrap(node: TypeNode) -> TypeNode:
    """Strip Optional/Nullable/Default wrappers, in any nesting order."""
    while node.is_modifier and node.inner is not None:
        node = node.inner
    return node


def is_required(node: TypeNode) -> bool:
    """True unless some wrapper in the chain makes the value omittable."""
    while node.is_modifier:
        if node.kind in (NodeKind.OPTIONAL, NodeKind.DEFAULT):
            return False
        if node.inner is None:
            break
        node = node.inner
    return True


def translate(node: TypeNode, max_depth: int = DEFAULT_MAX_DEPTH) -> TargetSchema:
    """Translate one parameter type node into a ``TargetSchema``.

    Never raises: unknown kinds, and anything nested deeper than
    ``max_depth``, become a string schema with ``fallback=True``.
    """
    return _translate(node, max_depth)


def _translate(node: TypeNode, depth_left: int) -> TargetSchema:
    base = unwrap(node)
    description = base.description or _outer_description(node)

    if depth_left <= 0:
        _log.debug("Schema nesting exceeds depth limit; using string fallback")
        return TargetSchema(SchemaKind.STRING, description=description, fallback=True)

    kind = base.kind
    if kind is NodeKind.STRING:
        return TargetSchema(SchemaKind.STRING, description=description)
    if kind is NodeKind.NUMBER:
        schema_kind = SchemaKind.INTEGER if base.is_integer else SchemaKind.NUMBER
        return TargetSchema(schema_kind, description=description)
    if kind is NodeKind.BOOLEAN:
        return TargetSchema(SchemaKind.BOOLEAN, description=description)
    if kind is NodeKind.ENUM:
        return TargetSchema(
            SchemaKind.STRING,
            description=description,
            format="enum",
            enum=tuple(base.values),
        )
    if kind is NodeKind.ARRAY and base.element is not None:
        return TargetSchema(
            SchemaKind.ARRAY,
            description=description,
            items=_translate(base.element, depth_left - 1),
        )
    if kind is NodeKind.OBJECT:
        return TargetSchema(
            SchemaKind.OBJECT,
            description=description,
            properties={
                name: _translate(child, depth_left - 1)
                for name, child in base.fields.items()
            },
        )

    _log.debug("No schema mapping for %s node; using string fallback", kind.value)
    return TargetSchema(SchemaKind.STRING, description=description, fallback=True)


def _outer_description(node: TypeNode) -> Optional[str]:
    while node.is_modifier:
        if node.description:
            return node.description
        if node.inner is None:
            break
        node = node.inner
    return None
