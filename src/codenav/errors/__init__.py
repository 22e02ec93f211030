"""Error taxonomy and user-facing translation."""

from .exceptions import (
    CodeNavError,
    CorruptIndexError,
    ExtractionError,
    FileNotIndexedError,
    IndexNotFoundError,
    InputError,
    InvalidQueryError,
    InvalidRootError,
    RootNotDirectoryError,
    RootNotFoundError,
    ScanError,
    StoreError,
    SymbolNotFoundError,
)
from .translator import ErrorTranslator, UserFriendlyError

__all__ = [
    "CodeNavError",
    "CorruptIndexError",
    "ExtractionError",
    "FileNotIndexedError",
    "IndexNotFoundError",
    "InputError",
    "InvalidQueryError",
    "InvalidRootError",
    "RootNotDirectoryError",
    "RootNotFoundError",
    "ScanError",
    "StoreError",
    "SymbolNotFoundError",
    "ErrorTranslator",
    "UserFriendlyError",
]
