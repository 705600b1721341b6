"""Tests for the tool catalog and tool schemas."""

import pytest

from streamedit.tools import (
    FILE_EDIT_TOOLS,
    TOOL_SCHEMAS,
    ScanDirection,
    ToolCatalog,
    default_catalog,
)


def _names(schemas):
    return {s["function"]["name"] for s in schemas}


class TestDefaultCatalog:

    def test_knows_file_edit_tools(self):
        catalog = default_catalog()
        for name in FILE_EDIT_TOOLS:
            assert catalog.is_tool(name)
        assert catalog.params_for("replace_in_file") == ("path", "diff")
        assert catalog.params_for("write_to_file") == ("path", "content")

    def test_content_is_scanned_backward(self):
        catalog = default_catalog()
        assert catalog.scan_direction("write_to_file", "content") is ScanDirection.BACKWARD
        assert catalog.scan_direction("replace_in_file", "diff") is ScanDirection.FORWARD
        assert catalog.backward_params() == ["write_to_file.content"]

    def test_accepts_only_declared_params(self):
        catalog = default_catalog()
        assert catalog.accepts("read_file", "path")
        assert not catalog.accepts("read_file", "content")
        assert not catalog.accepts("no_such_tool", "path")
        assert catalog.params_for("no_such_tool") == ()

    def test_every_schema_is_in_catalog(self):
        assert set(default_catalog().tool_names) == _names(TOOL_SCHEMAS)


class TestCustomCatalog:

    def test_from_mapping(self):
        catalog = ToolCatalog.from_mapping({"note": ["title", "body"]}, ["note.body"])
        assert catalog.tool_names == ["note"]
        assert catalog.scan_direction("note", "body") is ScanDirection.BACKWARD
        assert catalog.to_mapping() == {"note": ["title", "body"]}

    def test_bad_backward_reference_format(self):
        with pytest.raises(ValueError):
            ToolCatalog.from_mapping({"note": ["body"]}, ["notebody"])

    def test_unknown_backward_param(self):
        with pytest.raises(ValueError):
            ToolCatalog({"note": ["body"]}, [("note", "title")])

    def test_from_schemas_skips_unnamed(self):
        schemas = [{"type": "function", "function": {"parameters": {}}}]
        assert ToolCatalog.from_schemas(schemas).tool_names == []

