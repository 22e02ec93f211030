"""Tests for index and query-result models."""

import json

from codenav.indexing.models import (
    CodebaseIndex,
    Entry,
    GraphEdge,
    RefMatch,
    RefsResult,
    StaleResult,
    Symbol,
    SymbolKind,
)


def _index() -> CodebaseIndex:
    return CodebaseIndex(
        root="/project",
        entries=[
            Entry(name="main.go", kind=SymbolKind.FILE, path="main.go", package="(root)"),
            Entry(name="main", kind=SymbolKind.FUNC, path="main.go", line=3, package="(root)"),
            Entry(name="util.go", kind=SymbolKind.FILE, path="pkg/util.go", package="pkg"),
            Entry(name="Helper", kind=SymbolKind.FUNC, path="pkg/util.go", line=5, package="pkg", exported=True),
            Entry(name="Makefile", kind=SymbolKind.FILE, path="Makefile", package="(root)"),
        ],
    )


class TestEntry:
    def test_kind_stored_as_plain_string(self):
        entry = Entry(name="Foo", kind=SymbolKind.STRUCT, path="a.go", line=2)
        assert entry.kind == "struct"
        assert not entry.is_file

    def test_file_entry(self):
        entry = Entry(name="a.go", kind=SymbolKind.FILE, path="a.go")
        assert entry.is_file
        assert entry.line == 0

    def test_str_includes_location(self):
        entry = Entry(name="Foo", kind=SymbolKind.FUNC, path="a.go", line=7)
        assert str(entry).endswith("a.go:7")


class TestCodebaseIndex:
    def test_file_and_symbol_split(self):
        idx = _index()
        assert idx.file_paths() == ["main.go", "pkg/util.go", "Makefile"]
        assert [e.name for e in idx.symbol_entries()] == ["main", "Helper"]

    def test_counts(self):
        idx = _index()
        assert idx.file_count() == 3
        assert idx.package_count() == 2
        assert idx.extension_counts() == {".go": 2, "(none)": 1}

    def test_has_file(self):
        idx = _index()
        assert idx.has_file("pkg/util.go")
        assert not idx.has_file("pkg")

    def test_find_definition_skips_file_entries(self):
        idx = _index()
        assert idx.find_definition("Helper").path == "pkg/util.go"
        assert idx.find_definition("main.go") is None
        assert idx.find_definition("Missing") is None


class TestSymbol:
    def test_end_line_alias(self):
        sym = Symbol.model_validate({"name": "f", "kind": "func", "line": 1, "endLine": 4})
        assert sym.end_line == 4


class TestResultSerialization:
    def test_refs_result_uses_camel_case(self):
        result = RefsResult(
            symbol="Helper",
            definition=RefMatch(path="a.go", line=1, content="func Helper()", is_definition=True),
            total_refs=0,
        )
        data = json.loads(result.to_json())
        assert data["totalReferences"] == 0
        assert data["definition"]["isDefinition"] is True

    def test_graph_edge_from_key(self):
        data = json.loads(GraphEdge(from_="a.go", to="b.go").to_json())
        assert data == {"from": "a.go", "to": "b.go"}

    def test_stale_result_defaults(self):
        data = json.loads(StaleResult().to_json())
        assert data["isStale"] is False
        assert data["summary"] == {"newCount": 0, "deletedCount": 0, "modifiedCount": 0}
