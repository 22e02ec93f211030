"""JavaScript/TypeScript symbol extractor using regex-based line scanning."""

import re

from codenav.indexing.extractors.base import BaseExtractor
from codenav.indexing.models import Symbol, SymbolKind
from codenav.utils.text_files import split_lines

_EXPORT = r'(?:export\s+)?(?:default\s+)?(?:declare\s+)?'

RE_FUNCTION = re.compile(rf'^{_EXPORT}(?:async\s+)?function\s*\*?\s*(\w+)')
RE_CLASS = re.compile(rf'^{_EXPORT}(?:abstract\s+)?class\s+(\w+)')
RE_INTERFACE = re.compile(rf'^{_EXPORT}interface\s+(\w+)')
RE_ENUM = re.compile(rf'^{_EXPORT}(?:const\s+)?enum\s+(\w+)')
RE_TYPE_ALIAS = re.compile(rf'^{_EXPORT}type\s+(\w+)\b')
RE_VARIABLE = re.compile(rf'^{_EXPORT}(const|let|var)\s+(\w+)')
RE_FUNCTION_VALUE = re.compile(
    r'=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*(?::[^=]+)?=>|\w+\s*=>|\($)'
)

_MODIFIERS = r'(?:(?:public|private|protected|static|readonly|abstract|override|async|get|set|declare)\s+)*'
RE_METHOD = re.compile(rf'^{_MODIFIERS}\*?\s*(#?\w+)\s*[<(]')
RE_FIELD_FUNCTION = re.compile(rf'^{_MODIFIERS}(#?\w+)\s*(?::[^=]+)?=\s*(?:async\s+)?(?:function\b|\()')

# JS keywords that look like method calls in class bodies
_JS_KEYWORDS = frozenset({
    "if", "else", "for", "while", "do", "switch", "case", "break",
    "continue", "return", "throw", "try", "catch", "finally",
    "new", "delete", "typeof", "instanceof", "void", "in", "of",
    "class", "extends", "super", "import", "export", "default",
    "function", "const", "let", "var", "this", "true", "false", "null",
    "await", "yield",
})

# A declaration line ending in one of these continues on the next line
_CONTINUATION_TAILS = ("(", ",", "=", "=>", "|", "&", "<", ":", "?", "extends", "implements")


def _code_only(lines: list[str]) -> list[str]:
    """Strip comments and blank string contents, keeping quote characters.

    Block comments and template literals carry over line boundaries, so a
    brace inside either never reaches the depth counter.
    """
    out: list[str] = []
    in_block = False
    in_template = False
    for line in lines:
        buf: list[str] = []
        i = 0
        n = len(line)
        while i < n:
            ch = line[i]
            if in_block:
                end = line.find("*/", i)
                if end < 0:
                    break
                in_block = False
                buf.append(" ")
                i = end + 2
                continue
            if in_template:
                if ch == "\\":
                    i += 2
                    continue
                if ch == "`":
                    in_template = False
                    buf.append(ch)
                i += 1
                continue
            if line.startswith("//", i):
                break
            if line.startswith("/*", i):
                in_block = True
                i += 2
                continue
            if ch == "`":
                in_template = True
                buf.append(ch)
                i += 1
                continue
            if ch in ("'", '"'):
                buf.append(ch)
                i += 1
                while i < n and line[i] != ch:
                    i += 2 if line[i] == "\\" else 1
                buf.append(ch)
                i += 1
                continue
            buf.append(ch)
            i += 1
        out.append("".join(buf))
    return out


def _brace_delta(code: str) -> int:
    return code.count("{") - code.count("}")


def _trim_first_brace(s: str) -> str:
    idx = s.find("{")
    if idx > 0:
        return s[:idx].strip()
    return s


class JSExtractor(BaseExtractor):

    extensions = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")

    def extract_symbols(self, file_path: str, source: str) -> list[Symbol]:
        if not source.strip():
            return []

        lines = split_lines(source)
        code_lines = _code_only(lines)
        symbols: list[Symbol] = []
        brace_depth = 0
        in_class: str | None = None
        class_entry_depth = 0
        class_opened = False

        for i, code in enumerate(code_lines):
            trimmed = code.strip()
            if not trimmed:
                continue

            if trimmed.startswith(("import ", "import{", "require(", "@")):
                brace_depth += _brace_delta(trimmed)
                continue

            signature_line = lines[i].strip()
            sym = None
            if brace_depth == 0:
                sym = self._match_top_level(trimmed, signature_line, i + 1)
            elif in_class is not None and brace_depth == class_entry_depth + 1:
                sym = self._match_method(trimmed, signature_line, i + 1, in_class)

            if sym is not None:
                end_line = self._block_end(code_lines, i)
                symbols.append(sym.model_copy(update={"end_line": end_line}))
                if sym.kind == SymbolKind.CLASS.value:
                    in_class = sym.name
                    class_entry_depth = brace_depth
                    class_opened = False

            brace_depth = max(brace_depth + _brace_delta(trimmed), 0)
            if in_class is not None:
                if "{" in trimmed:
                    class_opened = True
                if class_opened and brace_depth <= class_entry_depth:
                    in_class = None

        return symbols

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def _match_top_level(self, code: str, original: str, line_no: int) -> Symbol | None:
        exported = code.startswith("export ")

        m = RE_FUNCTION.match(code)
        if m:
            return self._symbol(m.group(1), SymbolKind.FUNC, line_no, exported, _trim_first_brace(original))

        m = RE_CLASS.match(code)
        if m:
            return self._symbol(m.group(1), SymbolKind.CLASS, line_no, exported, _trim_first_brace(original))

        m = RE_INTERFACE.match(code)
        if m:
            return self._symbol(m.group(1), SymbolKind.INTERFACE, line_no, exported, _trim_first_brace(original))

        # Before type/variable so "const enum" is not read as a constant
        m = RE_ENUM.match(code)
        if m:
            return self._symbol(m.group(1), SymbolKind.ENUM, line_no, exported, _trim_first_brace(original))

        m = RE_TYPE_ALIAS.match(code)
        if m:
            return self._symbol(m.group(1), SymbolKind.TYPE, line_no, exported, original)

        m = RE_VARIABLE.match(code)
        if m:
            keyword, name = m.groups()
            if RE_FUNCTION_VALUE.search(code):
                kind = SymbolKind.FUNC
                signature = _trim_first_brace(original)
            else:
                kind = SymbolKind.CONST if keyword == "const" else SymbolKind.VAR
                signature = original
            return self._symbol(name, kind, line_no, exported, signature.rstrip(";"))

        return None

    def _match_method(self, code: str, original: str, line_no: int, class_name: str) -> Symbol | None:
        if code in ("}", "};"):
            return None

        m = RE_METHOD.match(code) or RE_FIELD_FUNCTION.match(code)
        if not m:
            return None
        name = m.group(1)
        if name in _JS_KEYWORDS:
            return None

        exported = not name.startswith(("_", "#")) and not code.startswith("private ")
        return Symbol(
            name=name,
            kind=SymbolKind.METHOD,
            line=line_no,
            exported=exported,
            signature=self._truncate_signature(_trim_first_brace(original)),
            parent=class_name,
        )

    def _symbol(self, name: str, kind: SymbolKind, line_no: int, exported: bool, signature: str) -> Symbol:
        return Symbol(
            name=name,
            kind=kind,
            line=line_no,
            exported=exported,
            signature=self._truncate_signature(signature),
        )

    # ------------------------------------------------------------------
    # Block boundaries
    # ------------------------------------------------------------------

    @staticmethod
    def _block_end(code_lines: list[str], start: int) -> int:
        """Line (1-based) closing the declaration that starts at ``start``."""
        depth = 0
        opened = False
        for i in range(start, len(code_lines)):
            code = code_lines[i].strip()
            if not code:
                continue
            if "{" in code:
                opened = True
            depth += _brace_delta(code)
            if opened:
                if depth <= 0:
                    return i + 1
                continue
            if code.endswith(";"):
                return i + 1
            if not code.endswith(_CONTINUATION_TAILS) and not JSExtractor._next_opens(code_lines, i):
                return i + 1
        return len(code_lines)

    @staticmethod
    def _next_opens(code_lines: list[str], i: int) -> bool:
        """Allman-style brace on the following line."""
        for j in range(i + 1, len(code_lines)):
            code = code_lines[j].strip()
            if code:
                return code.startswith("{")
        return False
