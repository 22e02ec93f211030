"""Where execution enters the project: mains, HTTP routes, CLI commands, app setup."""

import posixpath
import re
from typing import Optional

from codenav.indexing.deadcode import is_test_file
from codenav.indexing.models import CodebaseIndex, EntryPoint, EntryPointsResult
from codenav.indexing.sources import SourceCache

KIND_MAIN = "main"
KIND_ROUTE = "route"
KIND_CLI = "cli"
KIND_INIT = "init"
ENTRY_POINT_KINDS = (KIND_MAIN, KIND_ROUTE, KIND_CLI, KIND_INIT)

_JS_PATTERNS = [
    (KIND_MAIN, re.compile(r"\b(?:createServer|\.listen|serve)\s*\(")),
    (KIND_ROUTE, re.compile(r"\b(?:app|router)\.(?:get|post|put|delete|patch|use|all)\s*\(")),
    (KIND_CLI, re.compile(r"\.command\s*\(")),
    (KIND_INIT, re.compile(r"\b(?:createApp|createRoot|ReactDOM\.render)\s*\(")),
]

# Checked in order; the first pattern that matches a line wins
PATTERNS: dict[str, list[tuple[str, re.Pattern]]] = {
    ".go": [
        (KIND_MAIN, re.compile(r"^func\s+main\s*\(\s*\)")),
        (KIND_INIT, re.compile(r"^func\s+init\s*\(\s*\)")),
        (KIND_ROUTE, re.compile(r"\.(?:HandleFunc|Handle|GET|POST|PUT|DELETE|PATCH|Get|Post|Put|Delete|Patch)\s*\(\s*\"")),
        (KIND_CLI, re.compile(r"&cobra\.Command\s*\{|\bflag\.Parse\s*\(")),
    ],
    ".py": [
        (KIND_MAIN, re.compile(r"^if\s+__name__\s*==\s*['\"]__main__['\"]")),
        (KIND_ROUTE, re.compile(r"^\s*@\w+\.(?:route|get|post|put|delete|patch)\s*\(")),
        (KIND_CLI, re.compile(r"\bargparse\.ArgumentParser\s*\(|^\s*@(?:click\.|\w+\.)?(?:command|group)\s*\(")),
        (KIND_INIT, re.compile(r"\b(?:Flask|FastAPI)\s*\(|^\s*setup\s*\(")),
    ],
    ".js": _JS_PATTERNS,
    ".jsx": _JS_PATTERNS,
    ".ts": _JS_PATTERNS,
    ".tsx": _JS_PATTERNS,
    ".rs": [(KIND_MAIN, re.compile(r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+main\s*\("))],
    ".java": [(KIND_MAIN, re.compile(r"\bpublic\s+static\s+void\s+main\s*\("))],
}


def find_entry_points(
    index: CodebaseIndex,
    sources: SourceCache,
    kind: Optional[str] = None,
    max_results: int = 100,
) -> EntryPointsResult:
    found: list[EntryPoint] = []
    for path in index.file_paths():
        patterns = PATTERNS.get(posixpath.splitext(path)[1])
        if not patterns or is_test_file(path):
            continue
        lines = sources.lines(path)
        if lines is None:
            continue
        for line_no, line in enumerate(lines, 1):
            for ep_kind, regex in patterns:
                if regex.search(line):
                    found.append(EntryPoint(path=path, line=line_no, kind=ep_kind, signature=line.strip()))
                    break

    order = {k: i for i, k in enumerate(ENTRY_POINT_KINDS)}
    found.sort(key=lambda ep: (order[ep.kind], ep.path, ep.line))
    if kind:
        found = [ep for ep in found if ep.kind == kind]
    return EntryPointsResult(entry_points=found[:max_results], total=len(found))
