"""Tests for entry point detection."""

import pytest

from codenav.errors import InvalidQueryError

PROJECT = {
    "cmd/main.go": (
        "package main\n"
        "\n"
        "import \"flag\"\n"
        "\n"
        "func init() {}\n"
        "\n"
        "func main() {\n"
        "\tflag.Parse()\n"
        "\thttp.HandleFunc(\"/health\", health)\n"
        "}\n"
    ),
    "cmd/main_test.go": "package main\n\nfunc main() {}\n",
    "server.py": (
        "from flask import Flask\n"
        "\n"
        "app = Flask(__name__)\n"
        "\n"
        "\n"
        "@app.route(\"/\")\n"
        "def index():\n"
        "    return 'ok'\n"
        "\n"
        "\n"
        "if __name__ == \"__main__\":\n"
        "    app.run()\n"
    ),
    "web/server.js": "const app = express();\napp.get('/users', list);\napp.listen(3000);\n",
}


class TestEntryPoints:
    def test_ordered_by_kind_then_location(self, make_query):
        result = make_query(PROJECT).entry_points()
        assert [(ep.kind, ep.path, ep.line) for ep in result.entry_points] == [
            ("main", "cmd/main.go", 7),
            ("main", "server.py", 11),
            ("main", "web/server.js", 3),
            ("route", "cmd/main.go", 9),
            ("route", "server.py", 6),
            ("route", "web/server.js", 2),
            ("cli", "cmd/main.go", 8),
            ("init", "cmd/main.go", 5),
            ("init", "server.py", 3),
        ]
        assert result.total == 9

    def test_signature_is_source_line(self, make_query):
        result = make_query(PROJECT).entry_points(kind="cli")
        assert [ep.signature for ep in result.entry_points] == ["flag.Parse()"]

    def test_test_files_skipped(self, make_query):
        result = make_query(PROJECT).entry_points()
        assert all(not ep.path.endswith("_test.go") for ep in result.entry_points)

    def test_kind_filter_and_max(self, make_query):
        q = make_query(PROJECT)
        routes = q.entry_points(kind="route")
        assert {ep.path for ep in routes.entry_points} == {"cmd/main.go", "server.py", "web/server.js"}
        assert routes.total == 3
        limited = q.entry_points(max_results=2)
        assert len(limited.entry_points) == 2
        assert limited.total == 9

    def test_unknown_kind(self, make_query):
        with pytest.raises(InvalidQueryError):
            make_query(PROJECT).entry_points(kind="handler")
