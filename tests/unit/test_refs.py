"""Tests for definition and reference lookup."""

import pytest

from codenav.errors import InvalidQueryError
from codenav.indexing import scan
from codenav.indexing.refs import definition_pattern, find_refs, word_pattern

TWO_FILES = {
    "a.go": "package main\n\nfunc Helper() int {\n\treturn 1\n}\n",
    "b.go": "package main\n\nfunc main() {\n\tHelper()\n}\n",
}


class TestRefs:
    def test_definition_and_single_reference(self, make_project, registry):
        index = scan(make_project(TWO_FILES), registry)
        result = find_refs(index, "Helper", 50)

        assert result.definition.path == "a.go"
        assert result.definition.line == 3
        assert result.definition.is_definition
        assert [(r.path, r.line) for r in result.references] == [("b.go", 4)]
        assert result.total_refs == 1

    def test_definition_line_never_in_references(self, make_project, registry):
        files = dict(TWO_FILES)
        files["c.go"] = "package main\n\nvar x = Helper() + Helper()\n"
        index = scan(make_project(files), registry)
        result = find_refs(index, "Helper", 50)

        sites = {(r.path, r.line) for r in result.references}
        assert ("a.go", 3) not in sites
        # One match per line even with two occurrences
        assert [(r.path, r.line) for r in result.references] == [("b.go", 4), ("c.go", 3)]

    def test_word_boundaries(self, make_project, registry):
        index = scan(make_project({
            "a.go": "package main\n\nfunc Helper() {}\n",
            "b.go": "package main\n\nfunc x() {\n\tHelperFunc()\n\tmyHelper()\n\tpkg.Helper()\n}\n",
        }), registry)
        result = find_refs(index, "Helper", 50)
        assert [(r.path, r.line) for r in result.references] == [("b.go", 6)]

    def test_form_feed_does_not_shift_lines(self, make_project, registry):
        index = scan(make_project({
            "a.go": "package a\n// x\x0cy\nfunc Helper() {}\n",
            "b.py": "import os\n\x0c\ndef helper():\n    return Helper()\n",
        }), registry)
        entry = index.find_definition("helper")
        assert (entry.path, entry.line) == ("b.py", 3)

        result = find_refs(index, "Helper", 50)
        assert result.definition.line == 3
        assert result.definition.content == "func Helper() {}"
        assert [(r.path, r.line) for r in result.references] == [("b.py", 4)]

    def test_heuristic_definition_excluded(self, make_project, registry):
        index = scan(make_project({
            "notes.txt": "class Widget is documented here\nuse Widget wisely\n",
        }), registry)
        result = find_refs(index, "Widget", 50)

        assert result.definition.path == "notes.txt"
        assert result.definition.line == 1
        assert [(r.path, r.line) for r in result.references] == [("notes.txt", 2)]

    def test_truncation(self, make_project, registry):
        body = "package main\n\nfunc f() {\n" + "\tHelper()\n" * 5 + "}\n"
        files = dict(TWO_FILES, **{"b.go": body})
        index = scan(make_project(files), registry)
        result = find_refs(index, "Helper", 2)

        assert len(result.references) == 2
        assert result.total_refs == 2
        assert result.definition.path == "a.go"

    def test_indexed_definition_found_after_truncation(self, make_project, registry):
        index = scan(make_project({
            "a_use.go": "package main\n\nfunc f() {\n\tLater()\n\tLater()\n}\n",
            "z_def.go": "package main\n\nfunc Later() {}\n",
        }), registry)
        result = find_refs(index, "Later", 1)
        assert (result.definition.path, result.definition.line) == ("z_def.go", 3)

    def test_unknown_symbol_is_empty(self, make_project, registry):
        index = scan(make_project(TWO_FILES), registry)
        result = find_refs(index, "Nowhere", 50)
        assert result.definition is None
        assert result.references == []
        assert result.total_refs == 0

    def test_empty_symbol_rejected(self, make_project, registry):
        index = scan(make_project(TWO_FILES), registry)
        with pytest.raises(InvalidQueryError):
            find_refs(index, "  ", 50)


class TestPatterns:
    def test_word_pattern_escapes(self):
        assert word_pattern("a.b").search("x a.b y")
        assert not word_pattern("a.b").search("axb")

    @pytest.mark.parametrize("line", [
        "func Run() {",
        "func (s *Server) Run() error {",
        "type Run struct {}",
        "def Run(self):",
        "class Run:",
        "export function Run() {",
        "const Run = 1",
        "export interface Run {",
        "enum Run {",
    ])
    def test_definition_lines(self, line):
        assert definition_pattern("Run").search(line)

    @pytest.mark.parametrize("line", ["Run()", "x := Run(1)", "func Runner() {", "return Run"])
    def test_reference_lines(self, line):
        assert not definition_pattern("Run").search(line)
