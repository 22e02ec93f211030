"""Tests for symbol search, exports and outlines."""

import pytest

from codenav.errors import FileNotIndexedError, InvalidQueryError
from codenav.indexing.sources import SourceCache
from codenav.indexing.symbols import ParsedFiles

PROJECT = {
    "pkg/server.go": (
        "package pkg\n"
        "\n"
        "type Server struct{}\n"
        "\n"
        "func NewServer() *Server {\n"
        "\treturn &Server{}\n"
        "}\n"
        "\n"
        "func (s *Server) serve() {}\n"
    ),
    "pkg/client.go": "package pkg\n\nfunc ServerURL() string {\n\treturn \"\"\n}\n",
    "pkg/sub/inner.go": "package sub\n\nfunc Inner() {}\n",
    "app/web.ts": "export class WebServer {}\n",
    "README.md": "Server docs\n",
}


class TestSearchSymbols:
    def test_ranked_exact_prefix_substring(self, make_query):
        result = make_query(PROJECT).symbols("server")
        assert [m.name for m in result.matches] == ["Server", "ServerURL", "NewServer", "WebServer"]
        assert result.total == 4

    def test_kind_filter(self, make_query):
        result = make_query(PROJECT).symbols("server", kind="func")
        assert [m.name for m in result.matches] == ["ServerURL", "NewServer"]

    def test_max_results_keeps_total(self, make_query):
        result = make_query(PROJECT).symbols("server", max_results=1)
        assert [m.name for m in result.matches] == ["Server"]
        assert result.total == 4

    def test_match_carries_location_and_signature(self, make_query):
        match = make_query(PROJECT).symbols("NewServer").matches[0]
        assert (match.path, match.line) == ("pkg/server.go", 5)
        assert match.signature == "func NewServer() *Server"
        assert match.exported

    def test_empty_query(self, make_query):
        with pytest.raises(InvalidQueryError):
            make_query(PROJECT).symbols(" ")


class TestExports:
    def test_file_scope(self, make_query):
        result = make_query(PROJECT).exports("pkg/server.go")
        assert result.scope == "pkg/server.go"
        assert [s.name for s in result.symbols] == ["Server", "NewServer"]

    def test_directory_scope_is_not_recursive(self, make_query):
        result = make_query(PROJECT).exports("./pkg/")
        assert result.scope == "pkg"
        assert [s.name for s in result.symbols] == ["ServerURL", "Server", "NewServer"]

    def test_unknown_scope(self, make_query):
        with pytest.raises(FileNotIndexedError):
            make_query(PROJECT).exports("nowhere")


class TestOutline:
    def test_all_symbols_in_order(self, make_query):
        outline = make_query(PROJECT).outline("pkg/server.go")
        assert [(s.name, s.kind, s.parent) for s in outline] == [
            ("Server", "struct", ""),
            ("NewServer", "func", ""),
            ("serve", "method", "Server"),
        ]

    def test_non_source_file_has_no_symbols(self, make_query):
        assert make_query(PROJECT).outline("README.md") == []

    def test_unknown_file(self, make_query):
        with pytest.raises(FileNotIndexedError):
            make_query(PROJECT).outline("missing.go")


class TestParsedFiles:
    def test_enclosing_prefers_innermost(self, make_project, registry):
        root = make_project({
            "svc.py": (
                "class Service:\n"
                "    def run(self):\n"
                "        return helper()\n"
                "\n"
                "\n"
                "x = helper()\n"
            ),
        })
        parsed = ParsedFiles(registry, SourceCache(root))

        assert parsed.enclosing("svc.py", 3).name == "run"
        assert parsed.enclosing("svc.py", 1).name == "Service"
        assert parsed.enclosing("svc.py", 6) is None

    def test_unreadable_file_yields_nothing(self, make_project, registry):
        root = make_project({})
        parsed = ParsedFiles(registry, SourceCache(root))
        assert parsed.symbols("gone.py") == []
