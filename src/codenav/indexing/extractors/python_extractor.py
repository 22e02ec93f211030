"""Python symbol extractor using indentation-aware line scanning."""

import re

from codenav.indexing.extractors.base import BaseExtractor
from codenav.indexing.models import Symbol, SymbolKind
from codenav.utils.text_files import split_lines

RE_FUNC = re.compile(r'^(?:async\s+)?def\s+(\w+)\s*[\(\[]')
RE_CLASS = re.compile(r'^class\s+(\w+)')
RE_CONST = re.compile(r'^([A-Z][A-Z0-9_]*)\s*(?::[^=]*)?=(?!=)')
RE_DECORATOR = re.compile(r'^@\S+')


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def _string_continuations(lines: list[str]) -> list[bool]:
    """Flag lines that begin inside a triple-quoted string.

    Such lines are docstring or literal content; their indentation and text
    must not be read as declarations or block boundaries.
    """
    flags: list[bool] = []
    open_quote = ""
    for line in lines:
        flags.append(bool(open_quote))
        i = 0
        n = len(line)
        while i < n:
            if open_quote:
                end = line.find(open_quote, i)
                if end < 0:
                    break
                i = end + 3
                open_quote = ""
                continue
            ch = line[i]
            if ch == "#":
                break
            if ch in ('"', "'"):
                if line.startswith(ch * 3, i):
                    open_quote = ch * 3
                    i += 3
                    continue
                # Single-line string: skip to the closing quote
                i += 1
                while i < n and line[i] != ch:
                    i += 2 if line[i] == "\\" else 1
            i += 1
    return flags


class PythonExtractor(BaseExtractor):

    extensions = (".py",)

    def extract_symbols(self, file_path: str, source: str) -> list[Symbol]:
        if not source.strip():
            return []

        lines = split_lines(source)
        in_string = _string_continuations(lines)
        symbols: list[Symbol] = []

        current_class = ""
        class_body_indent = -1
        decorators: list[str] = []

        for i, line in enumerate(lines):
            if in_string[i]:
                continue
            stripped = line.strip()
            if not stripped:
                # Blank line between decorator and def detaches the decorator
                decorators = []
                continue
            if stripped.startswith("#"):
                continue

            indent = _indent(line)

            if current_class:
                if indent == 0:
                    current_class = ""
                elif class_body_indent < 0:
                    class_body_indent = indent

            if RE_DECORATOR.match(stripped):
                decorators.append(stripped)
                continue

            if indent == 0:
                m = RE_CLASS.match(stripped)
                if m:
                    name = m.group(1)
                    symbols.append(Symbol(
                        name=name,
                        kind=SymbolKind.CLASS,
                        line=i + 1,
                        end_line=self._block_end(lines, in_string, i),
                        exported=not name.startswith("_"),
                        signature=self._signature(decorators, stripped),
                    ))
                    current_class = name
                    class_body_indent = -1
                    decorators = []
                    continue

            m = RE_FUNC.match(stripped)
            if m:
                name = m.group(1)
                if indent == 0:
                    kind, parent = SymbolKind.FUNC, ""
                elif current_class and indent == class_body_indent:
                    kind, parent = SymbolKind.METHOD, current_class
                else:
                    # Nested function
                    decorators = []
                    continue
                symbols.append(Symbol(
                    name=name,
                    kind=kind,
                    line=i + 1,
                    end_line=self._block_end(lines, in_string, i),
                    exported=not name.startswith("_"),
                    signature=self._signature(decorators, stripped),
                    parent=parent,
                ))
                decorators = []
                continue

            if indent == 0:
                m = RE_CONST.match(stripped)
                if m:
                    symbols.append(Symbol(
                        name=m.group(1),
                        kind=SymbolKind.CONST,
                        line=i + 1,
                        end_line=i + 1,
                        exported=True,
                        signature=self._truncate_signature(stripped),
                    ))

            decorators = []

        return symbols

    @staticmethod
    def _block_end(lines: list[str], in_string: list[bool], start: int) -> int:
        """Last line (1-based) before the next code line at the same or lower indent."""
        base_indent = _indent(lines[start])
        last = start
        for i in range(start + 1, len(lines)):
            if in_string[i]:
                last = i
                continue
            stripped = lines[i].strip()
            if not stripped or stripped.startswith("#"):
                continue
            if _indent(lines[i]) <= base_indent:
                # Closing bracket of a multi-line signature stays in the block
                if stripped[0] in ")]" and i == last + 1:
                    last = i
                    continue
                break
            last = i
        return last + 1

    def _signature(self, decorators: list[str], def_line: str) -> str:
        def_line = self._truncate_signature(def_line)
        if not decorators:
            return def_line
        return "\n".join(decorators + [def_line])
