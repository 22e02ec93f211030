"""Orchestrates a full scan of a project tree into a CodebaseIndex."""

import logging
import os
import posixpath
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from codenav.core.config import IndexingConfig
from codenav.errors import ExtractionError, RootNotDirectoryError, RootNotFoundError, ScanError
from codenav.indexing.extractors import ExtractorRegistry
from codenav.indexing.ignore import IgnoreRules
from codenav.indexing.models import FILE_PACKAGE_ROOT, CodebaseIndex, Entry, SymbolKind
from codenav.utils.text_files import is_binary_content

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """RFC 3339 UTC timestamp with second precision."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def iter_project_files(root: Path, rules: IgnoreRules) -> Iterator[tuple[str, Path]]:
    """Yield ``(relative_posix_path, absolute_path)`` for every non-ignored file.

    Directories are visited in sorted order so repeated scans of an unchanged
    tree produce identical entry sequences.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        if rel_dir == ".":
            rel_dir = ""

        kept = []
        for name in sorted(dirnames):
            rel = posixpath.join(rel_dir, name) if rel_dir else name
            if rules.skip_dir(name) or rules.ignores(rel, is_dir=True):
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            rel = posixpath.join(rel_dir, name) if rel_dir else name
            abs_path = current / name
            if not abs_path.is_file() or rules.ignores(rel, is_dir=False):
                continue
            yield rel, abs_path


def package_of(rel_path: str) -> str:
    return posixpath.dirname(rel_path) or FILE_PACKAGE_ROOT


def resolve_root(root: str | Path) -> Path:
    """Absolute scan root, validated to be an existing directory."""
    path = Path(root).expanduser().absolute()
    if not path.exists():
        raise RootNotFoundError(str(path))
    if not path.is_dir():
        raise RootNotDirectoryError(str(path))
    return path.resolve()


class CodebaseIndexer:
    """Builds a fresh index of every file under a root."""

    def __init__(
        self,
        registry: ExtractorRegistry,
        config: Optional[IndexingConfig] = None,
    ) -> None:
        self._registry = registry
        self._config = config or IndexingConfig()

    def scan(self, root: str | Path) -> CodebaseIndex:
        root_path = resolve_root(root)
        rules = IgnoreRules.load(root_path, self._config)

        entries: list[Entry] = []
        attempted = 0
        failed = 0

        for rel, abs_path in iter_project_files(root_path, rules):
            package = package_of(rel)
            entries.append(Entry(
                name=abs_path.name,
                kind=SymbolKind.FILE,
                path=rel,
                package=package,
            ))

            extractor = self._registry.for_path(rel)
            if extractor is None:
                continue

            try:
                source = self._read_for_extraction(abs_path, rel)
                if source is None:
                    continue
                attempted += 1
                symbols = extractor.extract_symbols(rel, source)
            except ExtractionError as exc:
                # Read errors surface here before the attempt is counted
                if exc.stage == "read":
                    attempted += 1
                failed += 1
                logger.warning("Skipping %s: %s", rel, exc.cause)
                continue

            for sym in symbols:
                if sym.line < 1:
                    continue
                entries.append(Entry(
                    name=sym.name,
                    kind=sym.kind,
                    path=rel,
                    line=sym.line,
                    package=package,
                    exported=sym.exported,
                ))

        if attempted and failed == attempted:
            raise ScanError(f"all {attempted} source files under {root_path} failed to read or parse")

        index = CodebaseIndex(root=str(root_path), entries=entries, scanned_at=utc_timestamp())
        logger.info(
            "Scanned %s: %d files, %d symbols (%d parse failures)",
            root_path, index.file_count(), len(entries) - index.file_count(), failed,
        )
        return index

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_for_extraction(self, abs_path: Path, rel: str) -> Optional[str]:
        """Source text, or None for files that are skipped without counting as failures."""
        try:
            size = abs_path.stat().st_size
        except OSError as exc:
            logger.warning("Cannot stat %s: %s", rel, exc)
            return None
        if size > self._config.max_file_size:
            logger.debug("Skipping symbols for %s (%d bytes)", rel, size)
            return None
        try:
            data = abs_path.read_bytes()
        except OSError as exc:
            raise ExtractionError(rel, f"cannot read file: {exc}", stage="read") from exc
        if is_binary_content(data):
            logger.debug("Skipping symbols for binary file %s", rel)
            return None
        return data.decode("utf-8", errors="replace")
