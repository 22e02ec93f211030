"""Tests for the source-to-test file map."""

import pytest

from codenav.errors import InvalidQueryError
from codenav.indexing.testmap import render_test_map_text

PROJECT = {
    "pkg/a.go": "package pkg\n",
    "pkg/a_test.go": "package pkg\n",
    "pkg/b.go": "package pkg\n",
    "web/app.ts": "export const x = 1;\n",
    "web/app.test.ts": "import { x } from './app';\n",
    "lib/util.py": "def f():\n    pass\n",
    "lib/tests/test_util.py": "from lib.util import f\n",
    "lib/other.py": "x = 1\n",
    "README.md": "docs\n",
}


class TestTestMap:
    def test_pairs_and_summary(self, make_query):
        result = make_query(PROJECT).test_map()
        assert [(e.source_file, e.test_file) for e in result.entries] == [
            ("lib/other.py", ""),
            ("lib/util.py", "lib/tests/test_util.py"),
            ("pkg/a.go", "pkg/a_test.go"),
            ("pkg/b.go", ""),
            ("web/app.ts", "web/app.test.ts"),
        ]
        s = result.summary
        assert (s.total_source_files, s.tested_files, s.untested_files) == (5, 3, 2)
        assert s.coverage_ratio == pytest.approx(0.6)

    def test_untested_filter_keeps_summary(self, make_query):
        result = make_query(PROJECT).test_map(untested=True)
        assert [e.source_file for e in result.entries] == ["lib/other.py", "pkg/b.go"]
        assert result.summary.total_source_files == 5

    def test_tested_filter(self, make_query):
        result = make_query(PROJECT).test_map(tested=True)
        assert all(e.has_test for e in result.entries)
        assert len(result.entries) == 3

    def test_path_prefix_matches_whole_segments(self, make_query):
        q = make_query(PROJECT)
        assert [e.source_file for e in q.test_map("./pkg/").entries] == ["pkg/a.go", "pkg/b.go"]
        assert q.test_map("pk").summary.total_source_files == 0

    def test_max_results(self, make_query):
        result = make_query(PROJECT).test_map(max_results=1)
        assert len(result.entries) == 1
        assert result.summary.total_source_files == 5

    def test_conflicting_filters(self, make_query):
        with pytest.raises(InvalidQueryError):
            make_query(PROJECT).test_map(untested=True, tested=True)


def test_render(make_query):
    text = render_test_map_text(make_query(PROJECT).test_map())
    assert text.splitlines()[0] == "Source files: 5  tested: 3  untested: 2  coverage: 60%"
    assert "  pkg/b.go  (no test)" in text
