"""Import statement extraction and resolution to indexed files."""

import logging
import posixpath
import re
from typing import Optional

from codenav.indexing.models import CodebaseIndex
from codenav.indexing.sources import SourceCache

logger = logging.getLogger(__name__)

GO_EXTENSIONS = (".go",)
JS_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")
PY_EXTENSIONS = (".py",)
IMPORTABLE_EXTENSIONS = frozenset(GO_EXTENSIONS + JS_EXTENSIONS + PY_EXTENSIONS)

# Go: import "path", import alias "path", or a parenthesised block
RE_GO_IMPORT_SINGLE = re.compile(r'^\s*import\s+(?:[\w.]+\s+)?"([^"]+)"')
RE_GO_IMPORT_BLOCK = re.compile(r'^\s*import\s*\(')
RE_GO_IMPORT_LINE = re.compile(r'^\s*(?:[\w.]+\s+)?"([^"]+)"')
RE_GO_IMPORT_END = re.compile(r'^\s*\)')

# JS/TS: import/export ... from '...', bare import '...', require('...'), import('...')
RE_JS_FROM = re.compile(r'''(?:(?:import|export)\s+.*?|^\s*\}\s*)from\s+['"]([^'"]+)['"]''')
RE_JS_BARE = re.compile(r'''^\s*import\s+['"]([^'"]+)['"]''')
RE_JS_REQUIRE = re.compile(r'''(?:require|import)\s*\(\s*['"]([^'"]+)['"]\s*\)''')

# Python: from X import a, b / import a.b as c, d
RE_PY_FROM = re.compile(r'^\s*from\s+(\.*[\w.]*)\s+import\s+\(?\s*([\w\s,.*]+)')
RE_PY_IMPORT = re.compile(r'^\s*import\s+([\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+(?:\s+as\s+\w+)?)*)')


def extract_go_imports(lines: list[str]) -> list[str]:
    imports: list[str] = []
    in_block = False
    for line in lines:
        if in_block:
            if RE_GO_IMPORT_END.match(line):
                in_block = False
                continue
            m = RE_GO_IMPORT_LINE.match(line)
            if m:
                imports.append(m.group(1))
            continue
        if RE_GO_IMPORT_BLOCK.match(line):
            in_block = True
            continue
        m = RE_GO_IMPORT_SINGLE.match(line)
        if m:
            imports.append(m.group(1))
    return imports


def extract_js_imports(lines: list[str]) -> list[str]:
    imports: list[str] = []
    for line in lines:
        for regex in (RE_JS_FROM, RE_JS_BARE):
            m = regex.search(line)
            if m:
                imports.append(m.group(1))
                break
        imports.extend(m.group(1) for m in RE_JS_REQUIRE.finditer(line))
    return imports


def extract_py_imports(lines: list[str]) -> list[tuple[str, list[str]]]:
    """``(module, imported_names)`` pairs; names are empty for plain ``import``."""
    imports: list[tuple[str, list[str]]] = []
    for line in lines:
        m = RE_PY_FROM.match(line)
        if m:
            names = [n.strip().split(" as ")[0].strip() for n in m.group(2).split(",")]
            imports.append((m.group(1), [n for n in names if n and n != "*"]))
            continue
        m = RE_PY_IMPORT.match(line)
        if m:
            for part in m.group(1).split(","):
                module = part.strip().split()[0]
                imports.append((module, []))
    return imports


def conventional_test_paths(rel_path: str) -> list[str]:
    """Conventional test-file locations for a source file."""
    directory, filename = posixpath.split(rel_path)
    base, ext = posixpath.splitext(filename)
    join = posixpath.join

    if ext in GO_EXTENSIONS:
        return [join(directory, f"{base}_test.go")]
    if ext in JS_EXTENSIONS:
        candidates = []
        for e in JS_EXTENSIONS:
            candidates.append(join(directory, f"{base}.test{e}"))
            candidates.append(join(directory, f"{base}.spec{e}"))
        for e in JS_EXTENSIONS:
            candidates.append(join(directory, "__tests__", f"{base}{e}"))
            candidates.append(join(directory, "__tests__", f"{base}.test{e}"))
        return candidates
    if ext in PY_EXTENSIONS:
        return [
            join(directory, f"test_{base}.py"),
            join(directory, f"{base}_test.py"),
            join(directory, "tests", f"test_{base}.py"),
            join(directory, "tests", f"{base}_test.py"),
        ]
    return []


class ImportResolver:
    """Resolves each file's imports to indexed paths, caching per file."""

    def __init__(self, index: CodebaseIndex, sources: Optional[SourceCache] = None) -> None:
        self._sources = sources or SourceCache(index.root)
        self._paths = index.file_paths()
        self._indexed = set(self._paths)
        self._resolved: dict[str, list[str]] = {}
        self._go_dirs: Optional[dict[str, list[str]]] = None

    @property
    def paths(self) -> list[str]:
        return self._paths

    def is_indexed(self, path: str) -> bool:
        return path in self._indexed

    def imports_of(self, rel_path: str) -> list[str]:
        """Distinct indexed files imported by ``rel_path``, in source order."""
        if rel_path not in self._resolved:
            self._resolved[rel_path] = self._resolve_file(rel_path)
        return self._resolved[rel_path]

    def forward_adjacency(self) -> dict[str, list[str]]:
        """Importer -> imported files, for files with at least one import."""
        adjacency: dict[str, list[str]] = {}
        for path in self._paths:
            imports = self.imports_of(path)
            if imports:
                adjacency[path] = imports
        return adjacency

    @staticmethod
    def reverse_adjacency(forward: dict[str, list[str]]) -> dict[str, list[str]]:
        reverse: dict[str, list[str]] = {}
        for importer, imports in forward.items():
            for imported in imports:
                reverse.setdefault(imported, []).append(importer)
        return reverse

    def test_files_of(self, rel_path: str) -> list[str]:
        found: list[str] = []
        for candidate in conventional_test_paths(rel_path):
            candidate = posixpath.normpath(candidate)
            if candidate in self._indexed and candidate != rel_path and candidate not in found:
                found.append(candidate)
        return found

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve_file(self, rel_path: str) -> list[str]:
        ext = posixpath.splitext(rel_path)[1]
        if ext not in IMPORTABLE_EXTENSIONS:
            return []
        lines = self._sources.lines(rel_path)
        if lines is None:
            logger.debug("Skipping imports of unreadable or binary file %s", rel_path)
            return []

        file_dir = posixpath.dirname(rel_path)
        candidates: list[str] = []
        if ext in GO_EXTENSIONS:
            for imp in extract_go_imports(lines):
                candidates.extend(self._resolve_go(imp))
        elif ext in JS_EXTENSIONS:
            for imp in extract_js_imports(lines):
                candidates.extend(self._resolve_js(imp, file_dir))
        else:
            for module, names in extract_py_imports(lines):
                candidates.extend(self._resolve_py(module, names, file_dir))

        resolved: list[str] = []
        for candidate in candidates:
            if candidate != rel_path and candidate not in resolved:
                resolved.append(candidate)
        return resolved

    def _go_package_dirs(self) -> dict[str, list[str]]:
        """Directory -> non-test Go files in it."""
        if self._go_dirs is None:
            self._go_dirs = {}
            for path in self._paths:
                if path.endswith(".go") and not path.endswith("_test.go"):
                    self._go_dirs.setdefault(posixpath.dirname(path), []).append(path)
        return self._go_dirs

    def _resolve_go(self, imp: str) -> list[str]:
        # "example.com/project/utils" matches an indexed "utils" directory
        parts = imp.split("/")
        dirs = self._go_package_dirs()
        for i in range(len(parts)):
            files = dirs.get("/".join(parts[i:]))
            if files:
                return files
        return []

    def _resolve_js(self, imp: str, file_dir: str) -> list[str]:
        if not imp.startswith("."):
            return []
        target = posixpath.normpath(posixpath.join(file_dir, imp))
        if target in self._indexed:
            return [target]

        stems = [target]
        stem, ext = posixpath.splitext(target)
        # ESM TypeScript imports name the compiled .js file
        if ext in (".js", ".jsx", ".mjs", ".cjs"):
            stems.append(stem)
        for base in stems:
            for e in JS_EXTENSIONS:
                if base + e in self._indexed:
                    return [base + e]
        for e in JS_EXTENSIONS:
            candidate = posixpath.join(target, f"index{e}")
            if candidate in self._indexed:
                return [candidate]
        return []

    def _resolve_py(self, module: str, names: list[str], file_dir: str) -> list[str]:
        level = len(module) - len(module.lstrip("."))
        dotted = module.lstrip(".")
        parts = [p for p in dotted.split(".") if p]

        if level:
            base = file_dir
            for _ in range(level - 1):
                base = posixpath.dirname(base)
            bases = [base]
        else:
            # File directory first, then each ancestor up to the root
            bases = []
            current = file_dir
            while True:
                bases.append(current)
                if not current:
                    break
                current = posixpath.dirname(current)

        for base in bases:
            module_hit = self._py_module(base, parts) if parts else None
            submodules = [
                hit for hit in (self._py_module(base, parts + [name]) for name in names)
                if hit is not None
            ]
            if module_hit or submodules:
                return ([module_hit] if module_hit else []) + submodules
        return []

    def _py_module(self, base: str, parts: list[str]) -> Optional[str]:
        if not parts:
            return None
        as_file = posixpath.join(base, *parts) + ".py"
        if as_file in self._indexed:
            return as_file
        as_package = posixpath.join(base, *parts, "__init__.py")
        if as_package in self._indexed:
            return as_package
        return None
