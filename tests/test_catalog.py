"""Tests for catalog building from a tool provider."""

import logging

import pytest

from toolrelay.tools.catalog import ToolCatalog, build_catalog, declare_tool
from toolrelay.tools.schema import SchemaKind, ToolDeclaration
from toolrelay.tools.types import ToolDescription, TypeNode


class StubProvider:
    """Minimal tool provider returning a fixed tool list."""

    name = "stub"

    def __init__(self, tools=None, error=None):
        self.tools = tools or []
        self.error = error
        self.list_calls = 0

    async def list_tools(self):
        self.list_calls += 1
        if self.error:
            raise self.error
        return self.tools

    async def call_tool(self, name, arguments):
        raise AssertionError("not used")

    async def close(self):
        pass


def _metadata_tool():
    return ToolDescription(
        name="get_dataset_metadata",
        description="Fetch dataset metadata",
        parameters={
            "name": TypeNode.string(description="owner/slug"),
            "version": TypeNode.optional(TypeNode.number(is_integer=True)),
            "format": TypeNode.with_default(TypeNode.enum(["csv", "json"]), "csv"),
        },
    )


class TestDeclareTool:

    def test_top_level_object_with_tool_description(self):
        decl = declare_tool(_metadata_tool())
        params = decl.parameters.to_dict()
        assert params["type"] == "object"
        assert params["description"] == "Fetch dataset metadata"
        assert params["properties"] == {
            "name": {"type": "string", "description": "owner/slug"},
            "version": {"type": "integer"},
            "format": {"type": "string", "format": "enum", "enum": ["csv", "json"]},
        }

    def test_required_not_propagated_by_default(self):
        decl = declare_tool(_metadata_tool())
        assert "required" not in decl.parameters.to_dict()

    def test_required_propagated_when_enabled(self):
        decl = declare_tool(_metadata_tool(), propagate_required=True)
        assert decl.parameters.to_dict()["required"] == ["name"]

    def test_no_parameters(self):
        decl = declare_tool(ToolDescription(name="ping", description=""))
        assert decl.parameters.to_dict() == {"type": "object", "properties": {}}

    def test_fallback_logged(self, caplog):
        tool = ToolDescription(
            name="weird",
            description="",
            parameters={"blob": TypeNode.unknown(raw={"$ref": "#/x"})},
        )
        with caplog.at_level(logging.WARNING, logger="toolrelay.tools.catalog"):
            decl = declare_tool(tool)
        assert decl.parameters.properties["blob"].kind is SchemaKind.STRING
        assert "blob" in caplog.text


class TestBuildCatalog:

    @pytest.mark.asyncio
    async def test_single_tool(self):
        provider = StubProvider([_metadata_tool()])
        catalog = await build_catalog(provider)
        assert provider.list_calls == 1
        assert catalog.names == ["get_dataset_metadata"]
        assert "get_dataset_metadata" in catalog
        decls = catalog.function_declarations()
        assert decls[0]["name"] == "get_dataset_metadata"
        assert decls[0]["description"] == "Fetch dataset metadata"

    @pytest.mark.asyncio
    async def test_empty_catalog(self):
        catalog = await build_catalog(StubProvider([]))
        assert len(catalog) == 0
        assert catalog.function_declarations() == []

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self):
        provider = StubProvider(error=RuntimeError("transport closed"))
        with pytest.raises(RuntimeError, match="transport closed"):
            await build_catalog(provider)


class TestToolCatalog:

    def test_duplicate_names_first_wins(self):
        first = ToolDeclaration(name="a", description="first")
        second = ToolDeclaration(name="a", description="second")
        catalog = ToolCatalog([first, second])
        assert len(catalog) == 1
        assert catalog.get("a").description == "first"

    def test_merge_keeps_order_and_first(self):
        left = ToolCatalog([ToolDeclaration(name="a", description="left")])
        right = ToolCatalog([
            ToolDeclaration(name="b", description=""),
            ToolDeclaration(name="a", description="right"),
        ])
        merged = left.merge(right)
        assert merged.names == ["a", "b"]
        assert merged.get("a").description == "left"
        # originals untouched
        assert left.names == ["a"]

    def test_get_missing(self):
        assert ToolCatalog().get("nope") is None
