"""Exception hierarchy for scan, store and query failures."""

from typing import Optional


class CodeNavError(Exception):
    """Base class for every error raised by codenav."""


class InputError(CodeNavError):
    """Caller supplied an argument the operation cannot work with."""


class InvalidRootError(InputError):
    """Scan root is unusable."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"{reason}: {root}")


class RootNotFoundError(InvalidRootError):
    def __init__(self, root: str):
        super().__init__(root, "root directory not found")


class RootNotDirectoryError(InvalidRootError):
    def __init__(self, root: str):
        super().__init__(root, "root is not a directory")


class InvalidQueryError(InputError):
    """Empty query or unparseable pattern."""


class FileNotIndexedError(InputError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"file {path} not found in index")


class SymbolNotFoundError(InputError):
    def __init__(self, name: str, path: str):
        self.name = name
        self.path = path
        super().__init__(f"symbol {name!r} not declared in {path}")


class StoreError(CodeNavError):
    """The persisted index cannot be used; a rescan is required."""

    def __init__(self, message: str, index_dir: Optional[str] = None):
        self.index_dir = index_dir
        super().__init__(message)


class IndexNotFoundError(StoreError):
    pass


class CorruptIndexError(StoreError):
    pass


class ScanError(CodeNavError):
    """Every file selected for extraction failed."""


class ExtractionError(CodeNavError):
    """A single file could not be parsed. Callers skip the file."""

    def __init__(self, file_path: str, cause: str, stage: str = "parse"):
        self.file_path = file_path
        self.cause = cause
        self.stage = stage
        super().__init__(f"cannot extract symbols from {file_path}: {cause}")
