"""Tests for staleness checks against the live tree."""

import os
import time

from codenav.indexing import scan
from codenav.indexing.stale import check_staleness, parse_timestamp


def _touch_future(path, seconds=30):
    future = time.time() + seconds
    os.utime(path, (future, future))


class TestStaleness:
    def test_fresh_index_is_not_stale(self, make_project, registry):
        root = make_project({"a.go": "package a\n", "b.py": "X = 1\n"})
        result = check_staleness(scan(root, registry))

        assert not result.is_stale
        assert result.summary.new_count == 0

    def test_new_deleted_and_modified(self, make_project, registry):
        root = make_project({
            "keep.go": "package k\n",
            "gone.go": "package g\n",
            "edit.py": "X = 1\n",
        })
        index = scan(root, registry)

        (root / "gone.go").unlink()
        (root / "added.ts").write_text("export const y = 1;\n")
        _touch_future(root / "edit.py")

        result = check_staleness(index)
        assert result.is_stale
        assert result.new_files == ["added.ts"]
        assert result.deleted_files == ["gone.go"]
        assert result.modified_files == ["edit.py"]
        assert (result.summary.new_count, result.summary.deleted_count, result.summary.modified_count) == (1, 1, 1)
        assert result.scanned_at == index.scanned_at

    def test_ignored_files_not_reported_as_new(self, make_project, registry):
        root = make_project({".codenavignore": "*.log\n", "a.go": "package a\n"})
        index = scan(root, registry)
        (root / "debug.log").write_text("noise\n")
        (root / "node_modules").mkdir()
        (root / "node_modules" / "dep.js").write_text("x\n")

        assert not check_staleness(index).is_stale

    def test_parse_timestamp_accepts_z_suffix(self):
        parsed = parse_timestamp("2024-05-01T10:20:30Z")
        assert parsed.utcoffset().total_seconds() == 0
        assert parsed.second == 30
