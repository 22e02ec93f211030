"""Symbol-level queries that re-extract declarations from indexed files."""

import logging
import posixpath
from typing import Optional

from codenav.errors import ExtractionError, FileNotIndexedError
from codenav.indexing.extractors import ExtractorRegistry
from codenav.indexing.matching import validate_query
from codenav.indexing.models import CodebaseIndex, ExportsResult, Symbol, SymbolMatch, SymbolsResult
from codenav.indexing.sources import SourceCache

logger = logging.getLogger(__name__)


class ParsedFiles:
    """Symbols of indexed files, extracted at most once per file per run.

    Files without an extractor, unreadable files and files that fail to parse
    all yield an empty list.
    """

    def __init__(self, registry: ExtractorRegistry, sources: SourceCache) -> None:
        self._registry = registry
        self._sources = sources
        self._symbols: dict[str, list[Symbol]] = {}

    @property
    def sources(self) -> SourceCache:
        return self._sources

    def supports(self, path: str) -> bool:
        return self._registry.supports(path)

    def symbols(self, path: str) -> list[Symbol]:
        if path not in self._symbols:
            self._symbols[path] = self._extract(path)
        return self._symbols[path]

    def enclosing(self, path: str, line: int) -> Optional[Symbol]:
        """Innermost symbol whose line span contains ``line``."""
        best: Optional[Symbol] = None
        for sym in self.symbols(path):
            if sym.line > line:
                continue
            if sym.end_line and line > sym.end_line:
                continue
            if best is None or sym.line >= best.line:
                best = sym
        return best

    def _extract(self, path: str) -> list[Symbol]:
        if not self._registry.supports(path):
            return []
        text = self._sources.text(path)
        if text is None:
            return []
        try:
            return self._registry.extract(path, text)
        except ExtractionError as exc:
            logger.debug("Skipping %s: %s", path, exc.cause)
            return []


def _to_match(path: str, sym: Symbol) -> SymbolMatch:
    return SymbolMatch(
        name=sym.name,
        kind=sym.kind,
        path=path,
        line=sym.line,
        signature=sym.signature,
        exported=sym.exported,
        parent=sym.parent,
    )


def _rank(name: str, query: str) -> int:
    lowered = name.lower()
    if lowered == query:
        return 0
    if lowered.startswith(query):
        return 1
    return 2


def search_symbols(
    index: CodebaseIndex,
    parsed: ParsedFiles,
    query: str,
    kind: Optional[str] = None,
    max_results: int = 50,
) -> SymbolsResult:
    """Case-insensitive symbol-name search: exact, then prefix, then substring."""
    q = validate_query(query).lower()

    found: list[tuple[int, SymbolMatch]] = []
    for path in index.file_paths():
        if not parsed.supports(path):
            continue
        for sym in parsed.symbols(path):
            if kind and sym.kind != kind:
                continue
            if q not in sym.name.lower():
                continue
            found.append((_rank(sym.name, q), _to_match(path, sym)))

    found.sort(key=lambda item: (item[0], item[1].name.lower(), item[1].path, item[1].line))
    return SymbolsResult(
        query=query,
        matches=[m for _, m in found[:max_results]],
        total=len(found),
    )


def _scope_files(index: CodebaseIndex, scope: str) -> list[str]:
    if index.has_file(scope):
        return [scope]
    directory = "" if scope in ("", ".") else scope
    return [p for p in index.file_paths() if posixpath.dirname(p) == directory]


def list_exports(index: CodebaseIndex, parsed: ParsedFiles, scope: str) -> ExportsResult:
    """Exported symbols of one file, or of the files directly inside a directory."""
    scope = scope.strip()
    if scope.startswith("./"):
        scope = scope[2:]
    scope = scope.rstrip("/")

    files = _scope_files(index, scope)
    if not files:
        raise FileNotIndexedError(scope or ".")

    symbols = [
        _to_match(path, sym)
        for path in files
        for sym in parsed.symbols(path)
        if sym.exported
    ]
    return ExportsResult(scope=scope or ".", symbols=symbols)


def outline(index: CodebaseIndex, parsed: ParsedFiles, path: str) -> list[SymbolMatch]:
    if not index.has_file(path):
        raise FileNotIndexedError(path)
    return [_to_match(path, sym) for sym in parsed.symbols(path)]
