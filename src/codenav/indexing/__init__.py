"""Project-local code index: scan, persist, load and query."""

from pathlib import Path
from typing import Optional

from codenav.core.config import CodeNavConfig

from .models import CodebaseIndex, Entry, IndexMeta, Symbol, SymbolKind
from .extractors.base import BaseExtractor
from .extractors import ExtractorRegistry, build_default_registry
from .store import IndexStore, find_index_root, locate_store
from .indexer import CodebaseIndexer
from .query import IndexQuery


def scan(
    root: str | Path,
    registry: Optional[ExtractorRegistry] = None,
    config: Optional[CodeNavConfig] = None,
) -> CodebaseIndex:
    """Build a fresh index of ``root`` without persisting it."""
    config = config or CodeNavConfig()
    return CodebaseIndexer(registry or build_default_registry(), config.indexing).scan(root)


def load(root: str | Path, store_dir: str = ".codenav") -> CodebaseIndex:
    return IndexStore(Path(root), store_dir).load()


__all__ = [
    "CodebaseIndex",
    "Entry",
    "IndexMeta",
    "Symbol",
    "SymbolKind",
    "BaseExtractor",
    "ExtractorRegistry",
    "build_default_registry",
    "IndexStore",
    "find_index_root",
    "locate_store",
    "CodebaseIndexer",
    "IndexQuery",
    "scan",
    "load",
]
