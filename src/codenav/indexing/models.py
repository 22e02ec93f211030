"""Data models for the project-local code index and its query results."""

from collections import Counter
from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FILE_PACKAGE_ROOT = "(root)"
NO_EXTENSION = "(none)"


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 scan timestamp."""
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class SymbolKind(str, Enum):
    FILE = "file"
    FUNC = "func"
    METHOD = "method"
    TYPE = "type"
    STRUCT = "struct"
    CLASS = "class"
    INTERFACE = "interface"
    CONST = "const"
    VAR = "var"
    ENUM = "enum"


class _ResultModel(BaseModel):
    """Query results serialize with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_json(self, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent, by_alias=True)


class Symbol(BaseModel):
    """One declaration found by an extractor, before it becomes an Entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    name: str
    kind: SymbolKind
    line: int
    end_line: int = Field(default=0, alias="endLine")
    exported: bool = False
    signature: str = ""
    parent: str = ""


class Entry(BaseModel):
    """A persisted record for one file or one symbol."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str
    kind: SymbolKind
    path: str
    line: int = 0
    package: str = ""
    exported: bool = False

    @property
    def is_file(self) -> bool:
        return self.kind == SymbolKind.FILE.value

    def __str__(self) -> str:
        if self.line > 0:
            return f"{self.kind:10s} {self.name:30s} {self.path}:{self.line}"
        return f"{self.kind:10s} {self.name:30s} {self.path}"


class IndexMeta(_ResultModel):
    root: str
    scanned_at: str = Field(alias="scannedAt")
    version: str
    file_count: int = Field(alias="fileCount")
    package_count: int = Field(alias="packageCount")
    extensions: dict[str, int] = Field(default_factory=dict)

    @field_validator("scanned_at")
    @classmethod
    def validate_scanned_at(cls, v: str) -> str:
        parse_timestamp(v)
        return v


class CodebaseIndex(BaseModel):
    """Ordered entries plus the absolute root they were scanned from."""

    model_config = ConfigDict(use_enum_values=True)

    root: str
    entries: list[Entry] = Field(default_factory=list)
    scanned_at: str = ""

    def file_entries(self) -> list[Entry]:
        return [e for e in self.entries if e.is_file]

    def symbol_entries(self) -> list[Entry]:
        return [e for e in self.entries if not e.is_file]

    def file_paths(self) -> list[str]:
        return [e.path for e in self.entries if e.is_file]

    def has_file(self, path: str) -> bool:
        return any(e.is_file and e.path == path for e in self.entries)

    def file_count(self) -> int:
        return len(self.file_entries())

    def package_count(self) -> int:
        return len({e.package for e in self.entries if e.is_file})

    def extension_counts(self) -> dict[str, int]:
        counts: Counter[str] = Counter()
        for entry in self.file_entries():
            counts[PurePosixPath(entry.path).suffix or NO_EXTENSION] += 1
        return dict(sorted(counts.items()))

    def find_definition(self, name: str) -> Optional[Entry]:
        """First symbol entry with exactly this name."""
        for entry in self.entries:
            if entry.name == name and entry.line > 0:
                return entry
        return None


# ----------------------------------------------------------------------
# Query results
# ----------------------------------------------------------------------


class ScoredEntry(_ResultModel):
    entry: Entry
    score: float


class SearchMatch(_ResultModel):
    path: str
    line: int
    content: str


class RefMatch(_ResultModel):
    path: str
    line: int
    content: str
    is_definition: bool = Field(default=False, alias="isDefinition")


class RefsResult(_ResultModel):
    symbol: str
    definition: Optional[RefMatch] = None
    references: list[RefMatch] = Field(default_factory=list)
    total_refs: int = Field(default=0, alias="totalReferences")


class GraphNode(_ResultModel):
    path: str
    fan_in: int = Field(alias="fanIn")
    fan_out: int = Field(alias="fanOut")


class GraphEdge(_ResultModel):
    from_: str = Field(alias="from")
    to: str


class GraphStats(_ResultModel):
    total_files: int = Field(default=0, alias="totalFiles")
    total_edges: int = Field(default=0, alias="totalEdges")
    most_imported: str = Field(default="", alias="mostImported")
    most_dependent: str = Field(default="", alias="mostDependent")


class GraphResult(_ResultModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    stats: GraphStats = Field(default_factory=GraphStats)
    focus: str = ""


class RelatedResult(_ResultModel):
    file: str
    imports: list[str] = Field(default_factory=list)
    importers: list[str] = Field(default_factory=list)
    test_files: list[str] = Field(default_factory=list, alias="testFiles")


class ImpactTarget(_ResultModel):
    name: str
    file: str = ""
    line: int = 0
    kind: str = "symbol"


class ImpactRef(_ResultModel):
    file: str
    line: int = 0
    content: str = ""
    enclosing_symbol: str = Field(default="", alias="enclosingSymbol")


class ImpactLayer(_ResultModel):
    depth: int
    label: str
    refs: list[ImpactRef] = Field(default_factory=list)


class ImpactSummary(_ResultModel):
    total_files: int = Field(default=0, alias="totalFiles")
    total_ref_sites: int = Field(default=0, alias="totalRefSites")
    max_depth_reached: int = Field(default=0, alias="maxDepthReached")


class ImpactResult(_ResultModel):
    target: ImpactTarget
    layers: list[ImpactLayer] = Field(default_factory=list)
    summary: ImpactSummary = Field(default_factory=ImpactSummary)


class DeadCodeCandidate(_ResultModel):
    name: str
    kind: str
    path: str
    line: int
    signature: str = ""


class DeadCodeResult(_ResultModel):
    candidates: list[DeadCodeCandidate] = Field(default_factory=list)
    total_candidates: int = Field(default=0, alias="totalCandidates")


class StaleSummary(_ResultModel):
    new_count: int = Field(default=0, alias="newCount")
    deleted_count: int = Field(default=0, alias="deletedCount")
    modified_count: int = Field(default=0, alias="modifiedCount")


class StaleResult(_ResultModel):
    is_stale: bool = Field(default=False, alias="isStale")
    scanned_at: str = Field(default="", alias="scannedAt")
    new_files: list[str] = Field(default_factory=list, alias="newFiles")
    deleted_files: list[str] = Field(default_factory=list, alias="deletedFiles")
    modified_files: list[str] = Field(default_factory=list, alias="modifiedFiles")
    summary: StaleSummary = Field(default_factory=StaleSummary)


class SymbolMatch(_ResultModel):
    name: str
    kind: str
    path: str
    line: int
    signature: str = ""
    exported: bool = False
    parent: str = ""


class SymbolsResult(_ResultModel):
    query: str
    matches: list[SymbolMatch] = Field(default_factory=list)
    total: int = 0


class ExportsResult(_ResultModel):
    scope: str
    symbols: list[SymbolMatch] = Field(default_factory=list)


class ContextResult(_ResultModel):
    file: str
    symbol: str
    kind: str
    line: int
    end_line: int = Field(default=0, alias="endLine")
    signature: str = ""
    imports: list[str] = Field(default_factory=list)
    doc_comment: str = Field(default="", alias="docComment")
    body: str = ""


class LocateMatch(_ResultModel):
    category: str
    path: str
    name: str
    line: int = 0
    kind: str = ""
    content: str = ""
    score: int


class LocateResult(_ResultModel):
    query: str
    matches: list[LocateMatch] = Field(default_factory=list)
    total: int = 0


class TestMapEntry(_ResultModel):
    __test__ = False

    source_file: str = Field(alias="sourceFile")
    test_file: str = Field(default="", alias="testFile")
    has_test: bool = Field(default=False, alias="hasTest")


class TestMapSummary(_ResultModel):
    __test__ = False

    total_source_files: int = Field(default=0, alias="totalSourceFiles")
    tested_files: int = Field(default=0, alias="testedFiles")
    untested_files: int = Field(default=0, alias="untestedFiles")
    coverage_ratio: float = Field(default=0.0, alias="coverageRatio")


class TestMapResult(_ResultModel):
    __test__ = False

    summary: TestMapSummary = Field(default_factory=TestMapSummary)
    entries: list[TestMapEntry] = Field(default_factory=list)


class EntryPoint(_ResultModel):
    path: str
    line: int
    kind: str
    signature: str = ""


class EntryPointsResult(_ResultModel):
    entry_points: list[EntryPoint] = Field(default_factory=list, alias="entryPoints")
    total: int = 0


class FunctionComplexity(_ResultModel):
    path: str
    name: str
    line: int
    end_line: int = Field(alias="endLine")
    complexity: int
    lines: int
    max_depth: int = Field(default=0, alias="maxDepth")
    params: int = 0
    signature: str = ""


class ComplexityResult(_ResultModel):
    functions: list[FunctionComplexity] = Field(default_factory=list)
    total_functions: int = Field(default=0, alias="totalFunctions")
    avg_complexity: float = Field(default=0.0, alias="avgComplexity")
    max_complexity: int = Field(default=0, alias="maxComplexity")
    high_complexity_count: int = Field(default=0, alias="highComplexityCount")


class TodoComment(_ResultModel):
    path: str
    line: int
    tag: str
    message: str = ""
    content: str = ""


class TodosResult(_ResultModel):
    comments: list[TodoComment] = Field(default_factory=list)
    total: int = 0
    by_tag: dict[str, int] = Field(default_factory=dict, alias="byTag")


class SymbolCount(_ResultModel):
    exported: int = 0
    internal: int = 0


class ScopeResult(_ResultModel):
    directory: str
    files: list[str] = Field(default_factory=list)
    file_count: int = Field(default=0, alias="fileCount")
    loc: int = 0
    symbols: dict[str, SymbolCount] = Field(default_factory=dict)
    dependencies: list[str] = Field(default_factory=list)
    dependents: list[str] = Field(default_factory=list)
