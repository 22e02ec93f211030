"""One ranked answer to "where is X": files, then declarations, then content."""

import posixpath
import re

from codenav.indexing import matching, search
from codenav.indexing.models import CodebaseIndex, LocateMatch, LocateResult
from codenav.indexing.sources import SourceCache
from codenav.indexing.symbols import ParsedFiles, search_symbols

SCORE_FILE_EXACT = 100
SCORE_FILE_NAME = 80
SCORE_FILE_OTHER = 60
SCORE_SYMBOL_EXACT = 90
SCORE_SYMBOL_PREFIX = 75
SCORE_SYMBOL_OTHER = 65
SCORE_CONTENT = 50

CATEGORY_ORDER = ("file", "symbol", "content")


def _file_score(name: str, query: str) -> int:
    name = name.lower()
    if name == query or posixpath.splitext(name)[0] == query:
        return SCORE_FILE_EXACT
    if query in name:
        return SCORE_FILE_NAME
    return SCORE_FILE_OTHER


def _symbol_score(name: str, query: str) -> int:
    name = name.lower()
    if name == query:
        return SCORE_SYMBOL_EXACT
    if name.startswith(query):
        return SCORE_SYMBOL_PREFIX
    return SCORE_SYMBOL_OTHER


def locate(
    index: CodebaseIndex,
    parsed: ParsedFiles,
    sources: SourceCache,
    query: str,
    max_results: int,
) -> LocateResult:
    """Files, symbols and content lines for ``query``, best score first.

    Content lines are matched literally; one location appears at most once.
    """
    q = matching.validate_query(query)
    lowered = q.lower()

    found: list[LocateMatch] = []
    for scored in matching.match_scored(index.entries, q):
        entry = scored.entry
        if not entry.is_file:
            continue
        found.append(LocateMatch(
            category="file", path=entry.path, name=entry.name, kind=entry.kind,
            score=_file_score(entry.name, lowered),
        ))

    symbols = search_symbols(index, parsed, q, max_results=max(max_results * 5, 100))
    for m in symbols.matches:
        name = f"{m.parent}.{m.name}" if m.parent else m.name
        found.append(LocateMatch(
            category="symbol", path=m.path, name=name, line=m.line, kind=m.kind,
            content=m.signature, score=_symbol_score(m.name, lowered),
        ))

    for m in search.search(index, re.escape(q), max(max_results * 10, 200), sources):
        found.append(LocateMatch(
            category="content", path=m.path, name=posixpath.basename(m.path), line=m.line,
            content=m.content, score=SCORE_CONTENT,
        ))

    found.sort(key=lambda m: (-m.score, m.path, m.line))
    seen: set[tuple[str, int]] = set()
    unique: list[LocateMatch] = []
    for m in found:
        key = (m.path, m.line if m.category != "file" else -1)
        if key in seen:
            continue
        seen.add(key)
        unique.append(m)

    return LocateResult(query=q, matches=unique[:max_results], total=len(unique))


def render_locate_text(result: LocateResult) -> str:
    if not result.matches:
        return f"No matches for {result.query!r}"

    titles = {"file": "Files", "symbol": "Symbols", "content": "Content"}
    out: list[str] = []
    for category in CATEGORY_ORDER:
        group = [m for m in result.matches if m.category == category]
        if not group:
            continue
        out.append(f"{titles[category]}:")
        for m in group:
            if category == "file":
                out.append(f"  {m.path}")
            elif category == "symbol":
                out.append(f"  {m.kind:10s} {m.name:30s} {m.path}:{m.line}")
            else:
                out.append(f"  {m.path}:{m.line}  {m.content}")
        out.append("")
    out.append(f"{result.total} total matches")
    return "\n".join(out)
