"""Regular-expression search across indexed files."""

import re
from typing import Optional

from codenav.errors import InvalidQueryError
from codenav.indexing.models import CodebaseIndex, SearchMatch
from codenav.indexing.sources import SourceCache


def compile_pattern(pattern: str) -> re.Pattern:
    if not pattern or not pattern.strip():
        raise InvalidQueryError("query must not be empty")
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidQueryError(f"invalid pattern {pattern!r}: {exc}") from exc


def search(
    index: CodebaseIndex,
    pattern: str,
    max_results: int,
    sources: Optional[SourceCache] = None,
) -> list[SearchMatch]:
    """Lines matching ``pattern`` in index order, at most ``max_results``."""
    regex = compile_pattern(pattern)
    sources = sources or SourceCache(index.root)

    matches: list[SearchMatch] = []
    for path in index.file_paths():
        lines = sources.lines(path)
        if lines is None:
            continue
        for line_no, line in enumerate(lines, 1):
            if regex.search(line):
                matches.append(SearchMatch(path=path, line=line_no, content=line.strip()))
                if len(matches) >= max_results:
                    return matches
    return matches
