"""Reading source files for on-demand scans."""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 512


def is_binary_content(data: bytes) -> bool:
    """A NUL byte in the leading chunk marks the file as binary."""
    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def read_source(path: Path) -> Optional[str]:
    """Return the decoded text of ``path``, or None if unreadable or binary."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return None
    if is_binary_content(data):
        return None
    return data.decode("utf-8", errors="replace")


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r`` from each line.

    Form feeds and other Unicode line separators stay inside their line, so
    line numbers agree with editors and with the Go syntax tree.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def read_lines(path: Path) -> Optional[list[str]]:
    """Like read_source, split into lines without terminators."""
    text = read_source(path)
    if text is None:
        return None
    return split_lines(text)

