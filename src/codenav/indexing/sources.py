"""On-demand access to indexed file contents."""

from pathlib import Path
from typing import Optional

from codenav.utils.text_files import read_lines


class SourceCache:
    """Reads each indexed file at most once per query run.

    Binary and unreadable files are remembered as None and skipped by callers.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._lines: dict[str, Optional[list[str]]] = {}
        self._text: dict[str, Optional[str]] = {}

    def lines(self, rel_path: str) -> Optional[list[str]]:
        if rel_path not in self._lines:
            self._lines[rel_path] = read_lines(self._root / rel_path)
        return self._lines[rel_path]

    def text(self, rel_path: str) -> Optional[str]:
        if rel_path not in self._text:
            lines = self.lines(rel_path)
            self._text[rel_path] = None if lines is None else "\n".join(lines)
        return self._text[rel_path]
