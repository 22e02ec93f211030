"""Size, declarations and cross-directory dependencies of one directory."""

import posixpath

from codenav.indexing.imports import ImportResolver
from codenav.indexing.models import ScopeResult, SymbolCount
from codenav.indexing.symbols import ParsedFiles


def normalize_dir(directory: str) -> str:
    directory = directory.strip().removeprefix("./").rstrip("/")
    return directory or "."


def _in_scope(path: str, directory: str, recursive: bool) -> bool:
    parent = posixpath.dirname(path) or "."
    if parent == directory:
        return True
    if not recursive:
        return False
    return directory == "." or parent.startswith(directory + "/")


def _dir_of(path: str) -> str:
    return posixpath.dirname(path) or "."


def analyze_scope(
    resolver: ImportResolver,
    parsed: ParsedFiles,
    directory: str,
    recursive: bool = False,
) -> ScopeResult:
    directory = normalize_dir(directory)
    files = [p for p in resolver.paths if _in_scope(p, directory, recursive)]
    if not files:
        return ScopeResult(directory=directory)
    members = set(files)

    loc = 0
    symbols: dict[str, SymbolCount] = {}
    dependencies: set[str] = set()
    for path in files:
        lines = parsed.sources.lines(path)
        loc += len(lines) if lines else 0
        for sym in parsed.symbols(path):
            count = symbols.setdefault(sym.kind, SymbolCount())
            if sym.exported:
                count.exported += 1
            else:
                count.internal += 1
        dependencies.update(_dir_of(dep) for dep in resolver.imports_of(path) if dep not in members)

    dependents = {
        _dir_of(path)
        for path in resolver.paths
        if path not in members and any(dep in members for dep in resolver.imports_of(path))
    }

    return ScopeResult(
        directory=directory,
        files=sorted(posixpath.basename(p) if not recursive else p for p in files),
        file_count=len(files),
        loc=loc,
        symbols=dict(sorted(symbols.items())),
        dependencies=sorted(dependencies),
        dependents=sorted(dependents),
    )
