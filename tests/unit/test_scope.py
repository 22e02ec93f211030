"""Tests for directory scope summaries."""

from codenav.indexing.scope import normalize_dir

PROJECT = {
    "api/handler.py": (
        "from core.service import run\n"
        "\n"
        "\n"
        "def handle():\n"
        "    return run()\n"
        "\n"
        "\n"
        "def _helper():\n"
        "    pass\n"
    ),
    "api/v1/routes.py": "from api.handler import handle\n\n\ndef routes():\n    return handle\n",
    "core/service.py": "def run():\n    return 1\n",
    "main.py": "from api.handler import handle\n\nhandle()\n",
}


class TestScope:
    def test_direct_files_only(self, make_query):
        result = make_query(PROJECT).scope("api")
        assert result.files == ["handler.py"]
        assert result.file_count == 1
        assert result.loc == 9

    def test_symbol_counts(self, make_query):
        result = make_query(PROJECT).scope("api")
        assert result.symbols["func"].exported == 1
        assert result.symbols["func"].internal == 1

    def test_dependencies_and_dependents(self, make_query):
        result = make_query(PROJECT).scope("api/")
        assert result.dependencies == ["core"]
        assert result.dependents == [".", "api/v1"]

    def test_recursive(self, make_query):
        result = make_query(PROJECT).scope("./api", recursive=True)
        assert result.files == ["api/handler.py", "api/v1/routes.py"]
        assert result.loc == 14
        assert result.symbols["func"].exported == 2
        assert result.dependents == ["."]

    def test_root_directory(self, make_query):
        result = make_query(PROJECT).scope("")
        assert result.directory == "."
        assert result.files == ["main.py"]

    def test_empty_scope(self, make_query):
        result = make_query(PROJECT).scope("nowhere")
        assert result.file_count == 0
        assert result.symbols == {}
        assert result.dependencies == []


def test_normalize_dir():
    assert normalize_dir("./api/") == "api"
    assert normalize_dir("  ") == "."
