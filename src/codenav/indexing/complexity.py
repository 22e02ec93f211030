"""Cyclomatic complexity of functions and methods.

Go functions are measured on the tree-sitter syntax tree. Python and
JavaScript/TypeScript functions are measured with per-line branch patterns
over the declaration's line span, which is close enough to rank hotspots.
"""

import logging
import posixpath
import re
from typing import Optional

from tree_sitter import Node, Parser

from codenav.errors import FileNotIndexedError
from codenav.indexing.extractors.go_extractor import GO_LANGUAGE, GoExtractor, _end_line, _line, _text
from codenav.indexing.extractors.js_extractor import _brace_delta, _code_only
from codenav.indexing.imports import JS_EXTENSIONS
from codenav.indexing.models import CodebaseIndex, ComplexityResult, FunctionComplexity, Symbol, SymbolKind
from codenav.indexing.symbols import ParsedFiles

logger = logging.getLogger(__name__)

HIGH_COMPLEXITY = 10

_GO_BRANCHES = frozenset({
    "if_statement",
    "for_statement",
    "expression_switch_statement",
    "type_switch_statement",
    "select_statement",
    "expression_case",
    "type_case",
    "default_case",
    "communication_case",
})
_GO_NESTING = frozenset({
    "if_statement",
    "for_statement",
    "expression_switch_statement",
    "type_switch_statement",
    "select_statement",
})

RE_PY_BRANCH = re.compile(r"^\s*(?:if|elif|while|except|case|(?:async\s+)?for)\b")
RE_PY_NESTING = re.compile(r"^\s*(?:if|for|while|try|with|match|async\s+for|async\s+with)\b")
RE_PY_BOOL = re.compile(r"\b(?:and|or)\b")
RE_JS_BRANCH = re.compile(r"\b(?:if|for|while|case|catch)\b|&&|\|\||\?\?|\s\?\s")

_FUNCTION_KINDS = (SymbolKind.FUNC.value, SymbolKind.METHOD.value)
_IGNORED_PARAMS = frozenset({"self", "cls", "*", "/"})


def _param_list(signature: str) -> str:
    """Text between the first ``(`` and its matching ``)``."""
    start = signature.find("(")
    if start < 0:
        return ""
    depth = 0
    for i in range(start, len(signature)):
        if signature[i] in "([{":
            depth += 1
        elif signature[i] in ")]}":
            depth -= 1
            if depth == 0:
                return signature[start + 1:i]
    return signature[start + 1:]


def count_params(signature: str) -> int:
    def_line = signature.split("\n")[-1]
    parts: list[str] = []
    depth = 0
    current = ""
    for ch in _param_list(def_line):
        if ch in "([{<":
            depth += 1
        elif ch in ")]}>":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += ch
    parts.append(current)

    count = 0
    for part in parts:
        part = part.strip()
        if not part or part in _IGNORED_PARAMS:
            continue
        if re.split(r"[:=\s]", part.lstrip("*"), maxsplit=1)[0] not in _IGNORED_PARAMS:
            count += 1
    return count


# ----------------------------------------------------------------------
# Go
# ----------------------------------------------------------------------

def _go_walk(node: Node, depth: int) -> tuple[int, int]:
    """Decision points and deepest nesting below ``node``."""
    decisions = 0
    max_depth = depth
    for child in node.named_children:
        child_depth = depth
        if child.type in _GO_BRANCHES:
            decisions += 1
        elif child.type == "binary_expression":
            if _text(child.child_by_field_name("operator")) in ("&&", "||"):
                decisions += 1
        if child.type in _GO_NESTING:
            child_depth = depth + 1
            max_depth = max(max_depth, child_depth)
        sub_decisions, sub_depth = _go_walk(child, child_depth)
        decisions += sub_decisions
        max_depth = max(max_depth, sub_depth)
    return decisions, max_depth


def _go_params(node: Node) -> int:
    params = node.child_by_field_name("parameters")
    if params is None:
        return 0
    count = 0
    for param in params.named_children:
        if param.type == "parameter_declaration":
            count += max(1, len(param.children_by_field_name("name")))
        elif param.type == "variadic_parameter_declaration":
            count += 1
    return count


def go_functions(path: str, source: str) -> list[FunctionComplexity]:
    tree = Parser(GO_LANGUAGE).parse(source.encode("utf-8"))
    results: list[FunctionComplexity] = []
    for node in tree.root_node.named_children:
        if node.type not in ("function_declaration", "method_declaration"):
            continue
        name = _text(node.child_by_field_name("name"))
        if not name:
            continue
        if node.type == "method_declaration":
            receiver = GoExtractor._receiver_type_name(node.child_by_field_name("receiver"))
            if receiver:
                name = f"{receiver}.{name}"
        body = node.child_by_field_name("body")
        decisions, max_depth = _go_walk(body, 0) if body is not None else (0, 0)
        header = _text(node).split("{", 1)[0].strip()
        results.append(FunctionComplexity(
            path=path,
            name=name,
            line=_line(node),
            end_line=_end_line(node),
            complexity=1 + decisions,
            lines=_end_line(node) - _line(node) + 1,
            max_depth=max_depth,
            params=_go_params(node),
            signature=header,
        ))
    return results


# ----------------------------------------------------------------------
# Python and JavaScript
# ----------------------------------------------------------------------

def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _python_metrics(lines: list[str]) -> tuple[int, int]:
    base = _indent(lines[0])
    decisions = 0
    max_depth = 0
    for line in lines[1:]:
        code = line.split("#", 1)[0]
        if not code.strip():
            continue
        if RE_PY_BRANCH.match(code):
            decisions += 1
        decisions += len(RE_PY_BOOL.findall(code))
        if RE_PY_NESTING.match(code):
            max_depth = max(max_depth, (_indent(code) - base) // 4)
    return decisions, max_depth


def _js_metrics(lines: list[str]) -> tuple[int, int]:
    decisions = 0
    depth = 0
    max_depth = 0
    for code in _code_only(lines):
        decisions += len(RE_JS_BRANCH.findall(code))
        depth += _brace_delta(code)
        max_depth = max(max_depth, depth)
    # The function body's own braces are not nesting
    return decisions, max(0, max_depth - 1)


def heuristic_functions(path: str, symbols: list[Symbol], lines: list[str]) -> list[FunctionComplexity]:
    is_js = posixpath.splitext(path)[1] in JS_EXTENSIONS
    results: list[FunctionComplexity] = []
    for sym in symbols:
        if sym.kind not in _FUNCTION_KINDS:
            continue
        end = max(sym.end_line, sym.line)
        span = lines[sym.line - 1:end]
        if not span:
            continue
        decisions, max_depth = _js_metrics(span) if is_js else _python_metrics(span)
        results.append(FunctionComplexity(
            path=path,
            name=f"{sym.parent}.{sym.name}" if sym.parent else sym.name,
            line=sym.line,
            end_line=end,
            complexity=1 + decisions,
            lines=end - sym.line + 1,
            max_depth=max_depth,
            params=count_params(sym.signature),
            signature=sym.signature.split("\n")[-1],
        ))
    return results


def analyze_complexity(
    index: CodebaseIndex,
    parsed: ParsedFiles,
    file: Optional[str] = None,
    max_results: int = 20,
    min_complexity: int = 0,
) -> ComplexityResult:
    """Functions ranked by complexity; the summary covers every function measured."""
    if file is not None:
        if not index.has_file(file):
            raise FileNotIndexedError(file)
        paths = [file]
    else:
        paths = index.file_paths()

    functions: list[FunctionComplexity] = []
    for path in paths:
        if not parsed.supports(path):
            continue
        if path.endswith(".go"):
            source = parsed.sources.text(path)
            if not source:
                continue
            try:
                functions.extend(go_functions(path, source))
            except (ValueError, RuntimeError) as exc:
                logger.debug("Skipping %s: %s", path, exc)
            continue
        lines = parsed.sources.lines(path)
        if lines:
            functions.extend(heuristic_functions(path, parsed.symbols(path), lines))

    functions.sort(key=lambda f: (-f.complexity, f.path, f.line))
    total = len(functions)
    result = ComplexityResult(
        total_functions=total,
        avg_complexity=round(sum(f.complexity for f in functions) / total, 2) if total else 0.0,
        max_complexity=functions[0].complexity if functions else 0,
        high_complexity_count=sum(1 for f in functions if f.complexity >= HIGH_COMPLEXITY),
    )
    result.functions = [f for f in functions if f.complexity >= min_complexity][:max_results]
    logger.debug("Measured %d functions", total)
    return result
