"""TODO, FIXME, HACK and XXX markers across indexed files."""

import re
from collections import Counter
from typing import Optional

from codenav.indexing.models import CodebaseIndex, TodoComment, TodosResult
from codenav.indexing.sources import SourceCache

TODO_RE = re.compile(r"\b(TODO|FIXME|HACK|XXX)\b[:\s]*(.*)", re.IGNORECASE)


def find_todos(
    index: CodebaseIndex,
    sources: SourceCache,
    tag: Optional[str] = None,
    max_results: int = 100,
) -> TodosResult:
    """``total`` and ``by_tag`` count every marker; ``tag`` narrows only the listed comments."""
    wanted = tag.upper() if tag else None
    by_tag: Counter[str] = Counter()
    comments: list[TodoComment] = []

    for path in sorted(index.file_paths()):
        lines = sources.lines(path)
        if lines is None:
            continue
        for line_no, line in enumerate(lines, 1):
            m = TODO_RE.search(line)
            if m is None:
                continue
            found_tag = m.group(1).upper()
            by_tag[found_tag] += 1
            if wanted and found_tag != wanted:
                continue
            comments.append(TodoComment(
                path=path,
                line=line_no,
                tag=found_tag,
                message=m.group(2).strip(),
                content=line.strip(),
            ))

    return TodosResult(
        comments=comments[:max_results],
        total=sum(by_tag.values()),
        by_tag=dict(sorted(by_tag.items())),
    )
