"""Translate codenav errors to user-friendly messages."""

import re
from dataclasses import dataclass
from typing import List


@dataclass
class UserFriendlyError:
    """User-friendly error representation."""
    original_error: Exception
    title: str
    explanation: str
    actions: List[str]
    show_technical: bool = False


class ErrorTranslator:
    """Translate technical errors to user-friendly messages."""

    ERROR_PATTERNS = {
        # Store errors (must precede generic not-found pattern)
        r"IndexNotFoundError": {
            "title": "No index found",
            "explanation": "This directory has not been scanned yet, or the index was removed.",
            "actions": [
                "Build the index: codenav scan <root>",
                "Point at another project: --root <dir>",
            ],
        },
        r"CorruptIndexError": {
            "title": "Index is unreadable",
            "explanation": "The stored index could not be parsed. It may have been edited by hand or written by an incompatible version.",
            "actions": [
                "Rebuild the index: codenav scan <root>",
            ],
        },
        r"RootNotFoundError|RootNotDirectoryError": {
            "title": "Invalid scan root",
            "explanation": "The path given to scan must be an existing directory.",
            "actions": [
                "Check the path for typos",
                "Pass a directory, not a file",
            ],
        },
        r"FileNotIndexedError": {
            "title": "File not in index",
            "explanation": "Paths are matched relative to the project root as they were recorded by the last scan.",
            "actions": [
                "Use a root-relative path, e.g. pkg/module.py",
                "Rescan if the file was added recently: codenav scan <root>",
            ],
        },
        r"SymbolNotFoundError": {
            "title": "Symbol not found",
            "explanation": "The file was parsed but declares no symbol with that exact name.",
            "actions": [
                "List the file's declarations: codenav outline <file>",
                "Find where the symbol lives: codenav symbols <name>",
            ],
        },
        r"InvalidQueryError": {
            "title": "Invalid query",
            "explanation": "The query was empty, is not a valid regular expression, or a limit is out of range.",
            "actions": [
                "Provide a non-empty query",
                "Escape regex metacharacters when searching for literal text",
            ],
        },
        r"ScanError": {
            "title": "Scan failed",
            "explanation": "No file could be read for symbol extraction.",
            "actions": [
                "Check file permissions under the scan root",
                "Run with --log-level DEBUG for per-file details",
            ],
        },
        r"ValidationError|config": {
            "title": "Invalid configuration",
            "explanation": "The configuration file contains a value codenav cannot use.",
            "actions": [
                "Check .codenav.yaml against the documented settings",
                "Check CODENAV_* environment variables",
            ],
        },
    }

    def translate(self, error: Exception) -> UserFriendlyError:
        error_type = type(error).__name__
        full_error = f"{error_type}: {error}"

        for pattern, translation in self.ERROR_PATTERNS.items():
            if re.search(pattern, full_error, re.IGNORECASE):
                return UserFriendlyError(
                    original_error=error,
                    title=translation["title"],
                    explanation=translation["explanation"],
                    actions=translation["actions"],
                )

        return UserFriendlyError(
            original_error=error,
            title="Unexpected error",
            explanation=str(error),
            actions=["Run with --log-level DEBUG and inspect the output"],
            show_technical=True,
        )

    def format_for_cli(self, friendly_error: UserFriendlyError) -> str:
        output = f"[bold red]{friendly_error.title}[/]: {friendly_error.original_error}\n"
        if not friendly_error.show_technical:
            output += f"{friendly_error.explanation}\n"

        output += "[bold]How to fix:[/]\n"
        for i, action in enumerate(friendly_error.actions, 1):
            output += f"  {i}. {action}\n"

        return output.rstrip("\n")
