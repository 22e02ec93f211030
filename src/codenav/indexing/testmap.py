"""Source files paired with their conventional test files."""

import posixpath
from typing import Optional

from codenav.indexing.deadcode import is_test_file
from codenav.indexing.imports import ImportResolver
from codenav.indexing.models import TestMapEntry, TestMapResult, TestMapSummary

SOURCE_EXTENSIONS = frozenset({".go", ".js", ".jsx", ".ts", ".tsx", ".py"})


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def build_test_map(
    resolver: ImportResolver,
    path_prefix: Optional[str] = None,
    untested: bool = False,
    tested: bool = False,
    max_results: int = 500,
) -> TestMapResult:
    """Summary counts cover every matching source file; ``entries`` is filtered and truncated."""
    prefix = (path_prefix or "").strip().removeprefix("./").rstrip("/")

    entries: list[TestMapEntry] = []
    for path in resolver.paths:
        if posixpath.splitext(path)[1] not in SOURCE_EXTENSIONS or is_test_file(path):
            continue
        if prefix and not _under(path, prefix):
            continue
        tests = resolver.test_files_of(path)
        entries.append(TestMapEntry(
            source_file=path,
            test_file=tests[0] if tests else "",
            has_test=bool(tests),
        ))
    entries.sort(key=lambda e: e.source_file)

    tested_count = sum(1 for e in entries if e.has_test)
    summary = TestMapSummary(
        total_source_files=len(entries),
        tested_files=tested_count,
        untested_files=len(entries) - tested_count,
        coverage_ratio=tested_count / len(entries) if entries else 0.0,
    )

    if untested:
        entries = [e for e in entries if not e.has_test]
    elif tested:
        entries = [e for e in entries if e.has_test]
    return TestMapResult(summary=summary, entries=entries[:max_results])


def render_test_map_text(result: TestMapResult) -> str:
    s = result.summary
    out = [
        f"Source files: {s.total_source_files}  tested: {s.tested_files}  "
        f"untested: {s.untested_files}  coverage: {s.coverage_ratio:.0%}",
    ]
    for e in result.entries:
        out.append(f"  {e.source_file}  ->  {e.test_file}" if e.has_test else f"  {e.source_file}  (no test)")
    return "\n".join(out)
