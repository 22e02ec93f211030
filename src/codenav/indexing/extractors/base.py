"""Abstract base class for language-specific symbol extractors."""

from abc import ABC, abstractmethod
from typing import ClassVar

from codenav.indexing.models import Symbol

SIGNATURE_MAX_LEN = 200


class BaseExtractor(ABC):
    """Turns one file's text into a list of Symbols.

    Implementations must tolerate malformed input: return whatever could be
    recognised, and raise ExtractionError only when nothing can be attempted.
    """

    extensions: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def extract_symbols(self, file_path: str, source: str) -> list[Symbol]:
        ...

    @staticmethod
    def _truncate_signature(signature: str) -> str:
        signature = " ".join(signature.split())
        if len(signature) <= SIGNATURE_MAX_LEN:
            return signature
        return signature[: SIGNATURE_MAX_LEN - 3] + "..."
