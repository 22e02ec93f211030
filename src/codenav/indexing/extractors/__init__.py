"""Language-specific symbol extractors and the extension registry."""

from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from codenav.indexing.models import Symbol

from .base import BaseExtractor
from .go_extractor import GoExtractor
from .js_extractor import JSExtractor
from .python_extractor import PythonExtractor


class ExtractorRegistry:
    """Immutable extension -> extractor mapping.

    Built once per process and handed to every component that re-parses files.
    """

    def __init__(self, extractors: Iterable[BaseExtractor]) -> None:
        mapping: dict[str, BaseExtractor] = {}
        for extractor in extractors:
            for ext in extractor.extensions:
                ext = ext.lower()
                if ext in mapping:
                    raise ValueError(
                        f"extension {ext} claimed by both "
                        f"{type(mapping[ext]).__name__} and {type(extractor).__name__}"
                    )
                mapping[ext] = extractor
        self._by_extension: Mapping[str, BaseExtractor] = MappingProxyType(mapping)

    @property
    def extensions(self) -> frozenset[str]:
        return frozenset(self._by_extension)

    def for_extension(self, ext: str) -> Optional[BaseExtractor]:
        return self._by_extension.get(ext.lower())

    def for_path(self, path: str) -> Optional[BaseExtractor]:
        return self.for_extension(PurePosixPath(path).suffix)

    def supports(self, path: str) -> bool:
        return self.for_path(path) is not None

    def extract(self, path: str, source: str) -> list[Symbol]:
        """Extract with the matching variant; unsupported extensions yield []."""
        extractor = self.for_path(path)
        if extractor is None:
            return []
        return extractor.extract_symbols(path, source)


def build_default_registry() -> ExtractorRegistry:
    return ExtractorRegistry([GoExtractor(), JSExtractor(), PythonExtractor()])


__all__ = [
    "BaseExtractor",
    "ExtractorRegistry",
    "GoExtractor",
    "JSExtractor",
    "PythonExtractor",
    "build_default_registry",
]
