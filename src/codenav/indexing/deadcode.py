"""Exported symbols that nothing outside their own declaration refers to."""

import logging
import re
from typing import Optional

from codenav.indexing.models import CodebaseIndex, DeadCodeCandidate, DeadCodeResult, Symbol
from codenav.indexing.refs import definition_pattern, word_pattern
from codenav.indexing.symbols import ParsedFiles

logger = logging.getLogger(__name__)

DEFAULT_MAX = 50

TEST_FILE_RE = re.compile(r"(_test\.go|\.test\.[jt]sx?|\.spec\.[jt]sx?|test_[^/]*\.py|[^/]*_test\.py)$")

# Entry points and test hooks are called by the toolchain, not by project code
ENTRY_POINT_NAMES = frozenset({"main", "init"})
TEST_NAME_PREFIXES = ("Test", "Benchmark", "Example", "test_")


def is_test_file(path: str) -> bool:
    return TEST_FILE_RE.search(path) is not None


def is_entry_point(name: str) -> bool:
    return name in ENTRY_POINT_NAMES or name.startswith(TEST_NAME_PREFIXES)


class DeadCodeFinder:

    def __init__(self, index: CodebaseIndex, parsed: ParsedFiles) -> None:
        self._index = index
        self._parsed = parsed

    def find(
        self,
        kind: Optional[str] = None,
        path_prefix: Optional[str] = None,
        max_results: int = DEFAULT_MAX,
    ) -> DeadCodeResult:
        candidates: list[DeadCodeCandidate] = []
        for path in self._index.file_paths():
            if path_prefix and not path.startswith(path_prefix):
                continue
            if not self._parsed.supports(path) or is_test_file(path):
                continue
            for sym in self._parsed.symbols(path):
                if not sym.exported or is_entry_point(sym.name):
                    continue
                if kind and sym.kind != kind:
                    continue
                if not self._is_referenced(sym, path):
                    candidates.append(DeadCodeCandidate(
                        name=sym.name,
                        kind=sym.kind,
                        path=path,
                        line=sym.line,
                        signature=sym.signature,
                    ))

        candidates.sort(key=lambda c: (c.path, c.line))
        logger.debug("Dead code: %d candidates", len(candidates))
        return DeadCodeResult(candidates=candidates[:max_results], total_candidates=len(candidates))

    def _is_referenced(self, sym: Symbol, def_path: str) -> bool:
        """True at the first occurrence that is neither the declaration nor declaration-shaped."""
        word_re = word_pattern(sym.name)
        def_re = definition_pattern(sym.name)
        sources = self._parsed.sources
        for path in self._index.file_paths():
            text = sources.text(path)
            if text is None or sym.name not in text:
                continue
            for line_no, line in enumerate(sources.lines(path) or [], 1):
                if path == def_path and line_no == sym.line:
                    continue
                if word_re.search(line) and not def_re.search(line):
                    return True
        return False


def find_dead_code(
    index: CodebaseIndex,
    parsed: ParsedFiles,
    kind: Optional[str] = None,
    path_prefix: Optional[str] = None,
    max_results: int = DEFAULT_MAX,
) -> DeadCodeResult:
    return DeadCodeFinder(index, parsed).find(kind, path_prefix, max_results)
