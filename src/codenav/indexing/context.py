"""Source, doc comment and imports of one declaration, for pasting into a prompt."""

import posixpath
from typing import Optional

from codenav.errors import FileNotIndexedError, SymbolNotFoundError
from codenav.indexing.imports import (
    GO_EXTENSIONS,
    JS_EXTENSIONS,
    PY_EXTENSIONS,
    extract_go_imports,
    extract_js_imports,
    extract_py_imports,
)
from codenav.indexing.models import CodebaseIndex, ContextResult, Symbol
from codenav.indexing.symbols import ParsedFiles

_COMMENT_PREFIXES = {
    ".py": ("#",),
}
_SLASH_COMMENTS = ("//", "/*", "*")


def _comment_prefixes(path: str) -> tuple[str, ...]:
    return _COMMENT_PREFIXES.get(posixpath.splitext(path)[1], _SLASH_COMMENTS)


def raw_imports(path: str, lines: list[str]) -> list[str]:
    ext = posixpath.splitext(path)[1]
    if ext in GO_EXTENSIONS:
        return extract_go_imports(lines)
    if ext in JS_EXTENSIONS:
        return extract_js_imports(lines)
    if ext in PY_EXTENSIONS:
        return [module for module, _ in extract_py_imports(lines)]
    return []


def doc_comment(path: str, lines: list[str], line: int) -> str:
    """Contiguous comment lines directly above 1-based ``line``."""
    prefixes = _comment_prefixes(path)
    start = line - 1
    while start > 0 and lines[start - 1].strip().startswith(prefixes):
        start -= 1
    return "\n".join(lines[start:line - 1])


def _pick(candidates: list[Symbol]) -> Optional[Symbol]:
    for sym in candidates:
        if not sym.parent:
            return sym
    return candidates[0] if candidates else None


def symbol_context(index: CodebaseIndex, parsed: ParsedFiles, symbol: str, path: str) -> ContextResult:
    if not index.has_file(path):
        raise FileNotIndexedError(path)

    sym = _pick([s for s in parsed.symbols(path) if s.name == symbol])
    lines = parsed.sources.lines(path)
    if sym is None or lines is None:
        raise SymbolNotFoundError(symbol, path)

    end = sym.end_line if sym.end_line >= sym.line else sym.line
    return ContextResult(
        file=path,
        symbol=sym.name,
        kind=sym.kind,
        line=sym.line,
        end_line=sym.end_line,
        signature=sym.signature,
        imports=raw_imports(path, lines),
        doc_comment=doc_comment(path, lines, sym.line),
        body="\n".join(lines[sym.line - 1:end]),
    )


def render_context(result: ContextResult) -> str:
    parts = [f"File: {result.file}"]
    if result.imports:
        parts.append("Imports:")
        parts.extend(f"  {imp}" for imp in result.imports)
        parts.append("")
    if result.doc_comment:
        parts.append(result.doc_comment)
    parts.append(result.body)
    return "\n".join(parts)
