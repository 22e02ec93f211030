"""Definition and usage lookup for a symbol name.

Definitions are recognised two ways: the index entry for the name (the
authoritative location) and declaration-shaped lines such as ``func Name``
or ``class Name``. The line heuristic is textual, so a declaration-looking
line inside a string or comment is also treated as a definition, and a
declaration form not covered by the patterns counts as a reference.
"""

import re
from typing import Optional

from codenav.errors import InvalidQueryError
from codenav.indexing.models import CodebaseIndex, RefMatch, RefsResult
from codenav.indexing.sources import SourceCache

DEFINITION_PATTERNS = (
    r"func\s+{name}",               # Go function
    r"func\s+\([^)]+\)\s+{name}",   # Go method
    r"type\s+{name}",               # Go type
    r"var\s+{name}",                # Go/JS var
    r"const\s+{name}",              # Go/JS const
    r"class\s+{name}",              # JS/Python class
    r"def\s+{name}",                # Python function
    r"let\s+{name}",                # JS let
    r"function\s+{name}",           # JS function
    r"interface\s+{name}",          # Go/TS interface
    r"struct\s+{name}",
    r"enum\s+{name}",               # TS enum
)


def word_pattern(name: str) -> re.Pattern:
    """Whole-identifier occurrences of ``name``."""
    return re.compile(rf"(?<!\w){re.escape(name)}(?!\w)")


def definition_pattern(name: str) -> re.Pattern:
    bounded = rf"{re.escape(name)}(?!\w)"
    alternatives = "|".join(
        f"(?:{p.replace('{name}', bounded)})" for p in DEFINITION_PATTERNS
    )
    return re.compile(rf"(?<!\w)(?:{alternatives})")


class ReferenceFinder:
    """Classifies every whole-word occurrence of a symbol across the index."""

    def __init__(self, index: CodebaseIndex, sources: Optional[SourceCache] = None) -> None:
        self._index = index
        self._sources = sources or SourceCache(index.root)

    @property
    def sources(self) -> SourceCache:
        return self._sources

    def refs(self, symbol: str, max_results: int) -> RefsResult:
        symbol = symbol.strip()
        if not symbol:
            raise InvalidQueryError("query must not be empty")

        word_re = word_pattern(symbol)
        def_re = definition_pattern(symbol)
        authoritative = self._index.find_definition(symbol)

        definition: Optional[RefMatch] = None
        heuristic_definition: Optional[RefMatch] = None
        references: list[RefMatch] = []

        for path in self._index.file_paths():
            if len(references) >= max_results:
                break
            lines = self._sources.lines(path)
            if lines is None:
                continue
            for line_no, line in enumerate(lines, 1):
                if not word_re.search(line):
                    continue
                is_indexed_def = (
                    authoritative is not None
                    and authoritative.path == path
                    and authoritative.line == line_no
                )
                if is_indexed_def or def_re.search(line):
                    match = RefMatch(path=path, line=line_no, content=line.strip(), is_definition=True)
                    if is_indexed_def:
                        definition = match
                    elif heuristic_definition is None:
                        heuristic_definition = match
                    continue
                references.append(RefMatch(path=path, line=line_no, content=line.strip()))
                if len(references) >= max_results:
                    break

        # The scan can stop before reaching the indexed definition's file
        if definition is None and authoritative is not None:
            definition = self._definition_at(authoritative.path, authoritative.line)

        return RefsResult(
            symbol=symbol,
            definition=definition or heuristic_definition,
            references=references,
            total_refs=len(references),
        )

    def _definition_at(self, path: str, line_no: int) -> Optional[RefMatch]:
        lines = self._sources.lines(path)
        if lines is None or line_no > len(lines):
            return None
        return RefMatch(path=path, line=line_no, content=lines[line_no - 1].strip(), is_definition=True)


def find_refs(
    index: CodebaseIndex,
    symbol: str,
    max_results: int,
    sources: Optional[SourceCache] = None,
) -> RefsResult:
    return ReferenceFinder(index, sources).refs(symbol, max_results)
