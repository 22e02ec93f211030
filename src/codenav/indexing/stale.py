"""Compare a stored index against the live filesystem."""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from codenav.core.config import IndexingConfig
from codenav.indexing.ignore import IgnoreRules
from codenav.indexing.indexer import iter_project_files
from codenav.indexing.models import CodebaseIndex, StaleResult, StaleSummary, parse_timestamp

logger = logging.getLogger(__name__)

# Scan timestamps are truncated to whole seconds
MTIME_TOLERANCE = timedelta(seconds=1)


def check_staleness(
    index: CodebaseIndex,
    config: Optional[IndexingConfig] = None,
) -> StaleResult:
    """Classify files as new, deleted or modified since the index was built.

    The walk uses the same skip and ignore rules as a scan, so files a scan
    would never record are not reported as new.
    """
    root = Path(index.root)
    rules = IgnoreRules.load(root, config or IndexingConfig())
    threshold = (parse_timestamp(index.scanned_at) + MTIME_TOLERANCE).timestamp()

    indexed = set(index.file_paths())
    live: set[str] = set()
    new_files: list[str] = []
    modified_files: list[str] = []

    for rel, abs_path in iter_project_files(root, rules):
        live.add(rel)
        if rel not in indexed:
            new_files.append(rel)
            continue
        try:
            mtime = abs_path.stat().st_mtime
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", rel, exc)
            continue
        if mtime > threshold:
            modified_files.append(rel)

    deleted_files = sorted(indexed - live)
    new_files.sort()
    modified_files.sort()

    return StaleResult(
        is_stale=bool(new_files or deleted_files or modified_files),
        scanned_at=index.scanned_at,
        new_files=new_files,
        deleted_files=deleted_files,
        modified_files=modified_files,
        summary=StaleSummary(
            new_count=len(new_files),
            deleted_count=len(deleted_files),
            modified_count=len(modified_files),
        ),
    )
