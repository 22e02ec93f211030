"""Query interface over a loaded CodebaseIndex."""

import logging
from typing import Optional

from codenav.core.config import CodeNavConfig
from codenav.errors import InvalidQueryError
from codenav.indexing import (
    complexity,
    context,
    deadcode,
    entrypoints,
    graph,
    impact,
    locate,
    matching,
    scope,
    search,
    stale,
    symbols,
    testmap,
    todos,
)
from codenav.indexing.extractors import ExtractorRegistry, build_default_registry
from codenav.indexing.imports import ImportResolver
from codenav.indexing.models import (
    CodebaseIndex,
    ComplexityResult,
    ContextResult,
    DeadCodeResult,
    Entry,
    EntryPointsResult,
    ExportsResult,
    GraphResult,
    ImpactResult,
    LocateResult,
    RefsResult,
    RelatedResult,
    ScopeResult,
    ScoredEntry,
    SearchMatch,
    StaleResult,
    SymbolMatch,
    SymbolsResult,
    TestMapResult,
    TodosResult,
)
from codenav.indexing.refs import ReferenceFinder
from codenav.indexing.sources import SourceCache
from codenav.indexing.symbols import ParsedFiles

logger = logging.getLogger(__name__)


class IndexQuery:
    """Every read-only query against one index.

    File contents, parsed symbols and resolved imports are cached for the
    lifetime of the instance, which is one command invocation.
    """

    def __init__(
        self,
        index: CodebaseIndex,
        registry: Optional[ExtractorRegistry] = None,
        config: Optional[CodeNavConfig] = None,
    ) -> None:
        self._index = index
        self._config = config or CodeNavConfig()
        self._sources = SourceCache(index.root)
        self._parsed = ParsedFiles(registry or build_default_registry(), self._sources)
        self._resolver = ImportResolver(index, self._sources)

    @property
    def index(self) -> CodebaseIndex:
        return self._index

    @property
    def limits(self):
        return self._config.query

    @staticmethod
    def _limit(max_results: Optional[int], default: int) -> int:
        if max_results is None:
            return default
        if max_results < 1:
            raise InvalidQueryError(f"max results must be at least 1, got {max_results}")
        return max_results

    @staticmethod
    def _depth(depth: Optional[int]) -> Optional[int]:
        if depth is not None and depth < 0:
            raise InvalidQueryError(f"depth must not be negative, got {depth}")
        return depth

    def match_scored(self, query: str, max_results: Optional[int] = None) -> list[ScoredEntry]:
        scored = matching.match_scored(self._index.entries, query)
        return scored[: self._limit(max_results, self.limits.max_results)]

    def match(self, query: str, max_results: Optional[int] = None) -> list[Entry]:
        return [s.entry for s in self.match_scored(query, max_results)]

    def match_exact(self, query: str, max_results: Optional[int] = None) -> list[Entry]:
        limit = self._limit(max_results, self.limits.max_results)
        return matching.match_exact(self._index.entries, query)[:limit]

    def search(self, pattern: str, max_results: Optional[int] = None) -> list[SearchMatch]:
        return search.search(
            self._index, pattern, self._limit(max_results, self.limits.max_search_results), self._sources,
        )

    def refs(self, symbol: str, max_results: Optional[int] = None) -> RefsResult:
        finder = ReferenceFinder(self._index, self._sources)
        return finder.refs(symbol, self._limit(max_results, self.limits.max_refs))

    def graph(self) -> GraphResult:
        return graph.build_graph(self._resolver)

    def focused_graph(self, file: str, depth: Optional[int] = None) -> GraphResult:
        return graph.focused_graph(self._resolver, file, self._depth(depth))

    def related(self, file: str) -> RelatedResult:
        return graph.related(self._resolver, file)

    def impact(
        self,
        target: str,
        depth: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> ImpactResult:
        analyzer = impact.ImpactAnalyzer(self._index, self._parsed, self._resolver)
        return analyzer.analyze(
            target,
            depth=self.limits.impact_depth if depth is None else self._depth(depth),
            max_refs=self._limit(max_results, self.limits.impact_max),
        )

    def dead_code(
        self,
        kind: Optional[str] = None,
        path_prefix: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> DeadCodeResult:
        return deadcode.find_dead_code(
            self._index, self._parsed, kind, path_prefix, self._limit(max_results, self.limits.dead_code_max),
        )

    def symbols(
        self,
        query: str,
        kind: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> SymbolsResult:
        return symbols.search_symbols(
            self._index, self._parsed, query, kind, self._limit(max_results, self.limits.symbols_max),
        )

    def exports(self, scope: str) -> ExportsResult:
        return symbols.list_exports(self._index, self._parsed, scope)

    def outline(self, file: str) -> list[SymbolMatch]:
        return symbols.outline(self._index, self._parsed, file)

    def stale(self) -> StaleResult:
        return stale.check_staleness(self._index, self._config.indexing)

    def context(self, symbol: str, file: str) -> ContextResult:
        return context.symbol_context(self._index, self._parsed, symbol, file)

    def locate(self, query: str, max_results: Optional[int] = None) -> LocateResult:
        return locate.locate(
            self._index, self._parsed, self._sources, query, self._limit(max_results, self.limits.locate_max),
        )

    def test_map(
        self,
        path_prefix: Optional[str] = None,
        untested: bool = False,
        tested: bool = False,
        max_results: Optional[int] = None,
    ) -> TestMapResult:
        if untested and tested:
            raise InvalidQueryError("--untested and --tested are mutually exclusive")
        return testmap.build_test_map(
            self._resolver, path_prefix, untested, tested, self._limit(max_results, self.limits.test_map_max),
        )

    def entry_points(self, kind: Optional[str] = None, max_results: Optional[int] = None) -> EntryPointsResult:
        if kind and kind not in entrypoints.ENTRY_POINT_KINDS:
            raise InvalidQueryError(f"unknown entry point kind {kind!r}")
        return entrypoints.find_entry_points(
            self._index, self._sources, kind, self._limit(max_results, self.limits.entry_points_max),
        )

    def complexity(
        self,
        file: Optional[str] = None,
        max_results: Optional[int] = None,
        min_complexity: int = 0,
    ) -> ComplexityResult:
        return complexity.analyze_complexity(
            self._index,
            self._parsed,
            file,
            self._limit(max_results, self.limits.complexity_max),
            min_complexity,
        )

    def todos(self, tag: Optional[str] = None, max_results: Optional[int] = None) -> TodosResult:
        return todos.find_todos(self._index, self._sources, tag, self._limit(max_results, self.limits.todos_max))

    def scope(self, directory: str, recursive: bool = False) -> ScopeResult:
        return scope.analyze_scope(self._resolver, self._parsed, directory, recursive)
