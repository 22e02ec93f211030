"""Directory pruning and gitignore-style exclusion rules."""

import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable

from codenav.core.config import IndexingConfig

logger = logging.getLogger(__name__)

# Version-control metadata, dependency caches and build output
NOISE_DIRS = frozenset({
    ".git", ".hg", ".svn",
    "node_modules", "vendor", "__pycache__",
    ".idea", ".vscode", ".cursor",
    "dist", "build", ".next",
})


def read_ignore_file(path: Path) -> list[str]:
    """Patterns from a gitignore-style file; blank lines and comments dropped."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []
    patterns = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


def glob_match(pattern: str, path: str) -> bool:
    """Segment-wise glob: ``*`` and ``?`` never cross a ``/``."""
    pattern_parts = pattern.split("/")
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    return all(fnmatchcase(seg, pat) for pat, seg in zip(pattern_parts, path_parts))


class IgnoreRules:
    """Decides which directories to prune and which paths to leave out of a scan."""

    def __init__(self, patterns: Iterable[str] = (), skip_dirs: Iterable[str] = ()) -> None:
        self.patterns = list(patterns)
        self._skip_dirs = NOISE_DIRS | frozenset(skip_dirs)

    @classmethod
    def load(cls, root: Path, config: IndexingConfig) -> "IgnoreRules":
        patterns = read_ignore_file(root / config.ignore_file)
        patterns.extend(config.exclude_patterns)
        if patterns:
            logger.debug("Loaded %d ignore patterns for %s", len(patterns), root)
        return cls(patterns, skip_dirs=[config.store_dir, *config.skip_dirs])

    def skip_dir(self, name: str) -> bool:
        return name in self._skip_dirs or name.startswith(".")

    def ignores(self, rel_path: str, is_dir: bool) -> bool:
        """Match a root-relative POSIX path against the loaded patterns."""
        basename = rel_path.rsplit("/", 1)[-1]
        for pattern in self.patterns:
            if pattern.endswith("/"):
                if not is_dir:
                    continue
                dir_pattern = pattern.rstrip("/")
                if dir_pattern.startswith("/"):
                    if glob_match(dir_pattern[1:], rel_path):
                        return True
                    continue
                if glob_match(dir_pattern, basename) or glob_match(dir_pattern, rel_path):
                    return True
                continue

            if pattern.startswith("/"):
                if glob_match(pattern[1:], rel_path):
                    return True
                continue

            if "/" not in pattern:
                if glob_match(pattern, basename):
                    return True
                continue

            if glob_match(pattern, rel_path):
                return True
        return False
