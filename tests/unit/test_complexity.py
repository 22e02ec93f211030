"""Tests for function complexity metrics."""

import pytest

from codenav.errors import FileNotIndexedError
from codenav.indexing.complexity import count_params

PROJECT = {
    "calc.go": (
        "package calc\n"
        "\n"
        "func Simple() int {\n"
        "\treturn 1\n"
        "}\n"
        "\n"
        "func Branchy(a, b int, c string) int {\n"
        "\tif a > 0 && b > 0 {\n"
        "\t\tfor i := 0; i < a; i++ {\n"
        "\t\t\tif i == b {\n"
        "\t\t\t\treturn i\n"
        "\t\t\t}\n"
        "\t\t}\n"
        "\t}\n"
        "\tswitch c {\n"
        "\tcase \"x\":\n"
        "\t\treturn 1\n"
        "\tdefault:\n"
        "\t\treturn 2\n"
        "\t}\n"
        "}\n"
        "\n"
        "type T struct{}\n"
        "\n"
        "func (t *T) Method() {}\n"
    ),
    "logic.py": (
        "def classify(n, *, strict=False):\n"
        "    if n < 0 and strict:\n"
        "        return \"neg\"\n"
        "    elif n == 0:\n"
        "        return \"zero\"\n"
        "    for i in range(n):\n"
        "        if i > 10:\n"
        "            return \"big\"\n"
        "    return \"pos\"\n"
        "\n"
        "\n"
        "class Box:\n"
        "    def size(self):\n"
        "        return 0\n"
    ),
    "ui.js": (
        "function pick(a, b) {\n"
        "  if (a && b) {\n"
        "    return a;\n"
        "  }\n"
        "  return b ? a : null;\n"
        "}\n"
    ),
}


def _by_name(result):
    return {f.name: f for f in result.functions}


class TestGoComplexity:
    def test_decision_points_and_nesting(self, make_query):
        result = make_query(PROJECT).complexity(file="calc.go")
        assert [f.name for f in result.functions] == ["Branchy", "Simple", "T.Method"]
        branchy = result.functions[0]
        assert branchy.complexity == 8
        assert branchy.max_depth == 3
        assert branchy.params == 3
        assert (branchy.line, branchy.end_line, branchy.lines) == (7, 21, 15)

    def test_straight_line_function(self, make_query):
        simple = _by_name(make_query(PROJECT).complexity(file="calc.go"))["Simple"]
        assert (simple.complexity, simple.max_depth, simple.params) == (1, 0, 0)


class TestHeuristicComplexity:
    def test_python_branches(self, make_query):
        functions = _by_name(make_query(PROJECT).complexity(file="logic.py"))
        assert functions["classify"].complexity == 6
        assert functions["classify"].max_depth == 2
        assert functions["classify"].params == 2
        assert (functions["Box.size"].complexity, functions["Box.size"].params) == (1, 0)

    def test_javascript_branches(self, make_query):
        pick = _by_name(make_query(PROJECT).complexity(file="ui.js"))["pick"]
        assert pick.complexity == 4
        assert pick.max_depth == 1
        assert pick.params == 2


class TestSummary:
    def test_stats_cover_all_functions(self, make_query):
        result = make_query(PROJECT).complexity(min_complexity=5)
        assert [f.name for f in result.functions] == ["Branchy", "classify"]
        assert result.total_functions == 6
        assert result.max_complexity == 8
        assert result.high_complexity_count == 0

    def test_max_results(self, make_query):
        result = make_query(PROJECT).complexity(max_results=1)
        assert [f.name for f in result.functions] == ["Branchy"]

    def test_unknown_file(self, make_query):
        with pytest.raises(FileNotIndexedError):
            make_query(PROJECT).complexity(file="missing.go")


def test_count_params_skips_receivers_and_markers():
    assert count_params("@staticmethod\ndef f(cls, a: dict[str, int], *args, **kw)") == 3
    assert count_params("def g(self, /, x)") == 1
    assert count_params("function h()") == 0
