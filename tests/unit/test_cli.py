"""Tests for the codenav command-line interface."""

import json

import pytest
from click.testing import CliRunner

from codenav.cli.main import cli

PROJECT = {
    "a.go": "package main\n\nfunc Helper() int {\n\treturn 1\n}\n",
    "b.go": "package main\n\nfunc run() {\n\tHelper()\n}\n",
    "util.py": "def Unused():\n    pass\n",
    "x.py": "import util\n",
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def indexed(runner, make_project):
    root = make_project(PROJECT)
    result = runner.invoke(cli, ["scan", str(root)])
    assert result.exit_code == 0, result.output
    return root


class TestScan:
    def test_scan_writes_store(self, runner, make_project):
        root = make_project(PROJECT)
        result = runner.invoke(cli, ["scan", str(root)])

        assert result.exit_code == 0, result.output
        assert "Indexed" in result.output
        assert (root / ".codenav" / "index" / "meta.json").is_file()

    def test_scan_json(self, runner, make_project):
        root = make_project(PROJECT)
        result = runner.invoke(cli, ["--json", "scan", str(root)])

        assert result.exit_code == 0
        meta = json.loads(result.stdout)
        assert meta["fileCount"] == 4
        assert meta["extensions"] == {".go": 2, ".py": 2}

    def test_scan_missing_root(self, runner, tmp_path):
        result = runner.invoke(cli, ["scan", str(tmp_path / "absent")])
        assert result.exit_code == 1
        assert "Invalid scan root" in result.output

    def test_scan_uses_project_config(self, runner, make_project):
        root = make_project(dict(PROJECT, **{".codenav.yaml": "indexing:\n  store_dir: .nav\n"}))
        result = runner.invoke(cli, ["scan", str(root)])

        assert result.exit_code == 0, result.output
        assert (root / ".nav" / "index" / "index.json").is_file()


class TestQueries:
    def test_lookup_json_ranked(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "lookup", "helper", "--root", str(indexed)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data[0]["entry"]["name"] == "Helper"
        assert data[0]["score"] == 100.0

    def test_lookup_text(self, runner, indexed):
        result = runner.invoke(cli, ["lookup", "Helper", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        assert "Helper" in result.output

    def test_lookup_exact(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "lookup", "util", "--exact", "--root", str(indexed)])
        assert [e["path"] for e in json.loads(result.stdout)] == ["util.py", "util.py"]

    def test_refs_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "refs", "Helper", "--root", str(indexed)])

        data = json.loads(result.stdout)
        assert data["definition"]["path"] == "a.go"
        assert data["totalReferences"] == 1
        assert data["references"][0]["path"] == "b.go"

    def test_search(self, runner, indexed):
        result = runner.invoke(cli, ["search", "return 1", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        assert "a.go:4" in result.output

    def test_graph_dot(self, runner, indexed):
        result = runner.invoke(cli, ["graph", "--format", "dot", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        assert '"x.py" -> "util.py";' in result.output

    def test_graph_focus_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "graph", "--focus", "util.py", "--root", str(indexed)])
        data = json.loads(result.stdout)
        assert data["focus"] == "util.py"
        assert data["edges"] == [{"from": "x.py", "to": "util.py"}]

    def test_related(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "related", "util.py", "--root", str(indexed)])
        assert json.loads(result.stdout)["importers"] == ["x.py"]

    def test_impact_text(self, runner, indexed):
        result = runner.invoke(cli, ["impact", "Helper", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        assert 'Impact analysis for symbol "Helper" (a.go:3)' in result.output
        assert "Total blast radius: 1 files, 1 reference sites" in result.output

    def test_dead_code_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "dead-code", "--root", str(indexed)])
        data = json.loads(result.stdout)
        assert [c["name"] for c in data["candidates"]] == ["Unused"]
        assert data["totalCandidates"] == 1

    def test_symbols_exports_outline(self, runner, indexed):
        symbols = runner.invoke(cli, ["--json", "symbols", "help", "--root", str(indexed)])
        assert [m["name"] for m in json.loads(symbols.stdout)["matches"]] == ["Helper"]

        exports = runner.invoke(cli, ["--json", "exports", "a.go", "--root", str(indexed)])
        assert [s["name"] for s in json.loads(exports.stdout)["symbols"]] == ["Helper"]

        outline = runner.invoke(cli, ["--json", "outline", "b.go", "--root", str(indexed)])
        assert [s["name"] for s in json.loads(outline.stdout)] == ["run"]

    def test_stale(self, runner, indexed):
        (indexed / "new.go").write_text("package main\n")
        result = runner.invoke(cli, ["--json", "stale", "--root", str(indexed)])

        data = json.loads(result.stdout)
        assert data["isStale"] is True
        assert data["newFiles"] == ["new.go"]

    def test_root_discovered_from_working_directory(self, runner, indexed, monkeypatch):
        monkeypatch.chdir(indexed)
        result = runner.invoke(cli, ["--json", "refs", "Helper"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["definition"]["path"] == "a.go"


class TestAnalysisCommands:
    def test_context_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "context", "Helper", "a.go", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert (data["line"], data["endLine"]) == (3, 5)
        assert data["body"].startswith("func Helper() int {")

    def test_context_text(self, runner, indexed):
        result = runner.invoke(cli, ["context", "Helper", "a.go", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("File: a.go\n")

    def test_locate_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "locate", "Helper", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [(m["category"], m["path"], m["line"]) for m in data["matches"]] == [
            ("symbol", "a.go", 3),
            ("content", "b.go", 4),
        ]
        assert data["total"] == 2

    def test_test_map_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "test-map", "--untested", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["summary"]["totalSourceFiles"] == 4
        assert data["summary"]["testedFiles"] == 0
        assert len(data["entries"]) == 4

    def test_entry_points_none(self, runner, indexed):
        result = runner.invoke(cli, ["entry-points", "--kind", "main", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        assert "No entry points found" in result.output

    def test_complexity_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "complexity", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["totalFunctions"] == 3
        assert {f["name"] for f in data["functions"]} == {"Helper", "run", "Unused"}

    def test_todos_text(self, runner, indexed):
        result = runner.invoke(cli, ["todos", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        assert "0 markers" in result.output

    def test_scope_json(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "scope", ".", "--root", str(indexed)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["fileCount"] == 4
        assert data["files"] == ["a.go", "b.go", "util.py", "x.py"]


class TestErrors:
    def test_missing_index_text(self, runner, tmp_path):
        result = runner.invoke(cli, ["lookup", "x", "--root", str(tmp_path)])
        assert result.exit_code == 1
        assert "No index found" in result.output

    def test_missing_index_json(self, runner, tmp_path):
        result = runner.invoke(cli, ["--json", "refs", "x", "--root", str(tmp_path)])
        assert result.exit_code == 1
        assert '{"error": "no index found in' in result.output

    def test_invalid_regex(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "search", "(", "--root", str(indexed)])
        assert result.exit_code == 1
        assert "invalid pattern" in result.output

    def test_unknown_file(self, runner, indexed):
        result = runner.invoke(cli, ["related", "nope.py", "--root", str(indexed)])
        assert result.exit_code == 1
        assert "File not in index" in result.output

    @pytest.mark.parametrize("args", [
        ["lookup", "Helper", "--max=-1"],
        ["refs", "Helper", "--max=0"],
        ["impact", "Helper", "--depth=-1"],
        ["graph", "--focus", "a.go", "--depth=-3"],
    ])
    def test_out_of_range_options_rejected(self, runner, indexed, args):
        result = runner.invoke(cli, args + ["--root", str(indexed)])
        assert result.exit_code == 2
        assert "Invalid value" in result.output

    def test_unknown_symbol_in_context(self, runner, indexed):
        result = runner.invoke(cli, ["context", "Missing", "a.go", "--root", str(indexed)])
        assert result.exit_code == 1
        assert "Symbol not found" in result.output

    def test_conflicting_test_map_filters(self, runner, indexed):
        result = runner.invoke(cli, ["--json", "test-map", "--tested", "--untested", "--root", str(indexed)])
        assert result.exit_code == 1
        assert "mutually exclusive" in result.output
