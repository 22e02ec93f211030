"""Persistent storage for the entry store under ``<root>/<store_dir>/index/``."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from codenav import __version__
from codenav.errors import CorruptIndexError, IndexNotFoundError
from codenav.indexing.models import CodebaseIndex, Entry, IndexMeta
from codenav.utils.atomic_io import atomic_write_model, atomic_write_text

logger = logging.getLogger(__name__)

TOOL_VERSION = __version__
DEFAULT_STORE_DIR = ".codenav"
INDEX_FILE = "index.json"
META_FILE = "meta.json"

_ENTRIES = TypeAdapter(list[Entry])


class IndexStore:
    """Reads and writes the entries list and scan metadata as one unit."""

    def __init__(self, root: Path, store_dir: str = DEFAULT_STORE_DIR) -> None:
        self._root = Path(root)
        self._index_dir = self._root / store_dir / "index"

    @property
    def index_dir(self) -> Path:
        return self._index_dir

    @property
    def index_path(self) -> Path:
        return self._index_dir / INDEX_FILE

    @property
    def meta_path(self) -> Path:
        return self._index_dir / META_FILE

    def exists(self) -> bool:
        return self.index_path.is_file() and self.meta_path.is_file()

    def build_meta(self, index: CodebaseIndex) -> IndexMeta:
        return IndexMeta(
            root=index.root,
            scanned_at=index.scanned_at,
            version=TOOL_VERSION,
            file_count=index.file_count(),
            package_count=index.package_count(),
            extensions=index.extension_counts(),
        )

    def save(self, index: CodebaseIndex) -> IndexMeta:
        self._index_dir.mkdir(parents=True, exist_ok=True)
        meta = self.build_meta(index)
        atomic_write_text(
            self.index_path,
            _ENTRIES.dump_json(index.entries, indent=2).decode("utf-8"),
        )
        atomic_write_model(self.meta_path, meta)
        logger.info("Saved %d entries to %s", len(index.entries), self._index_dir)
        return meta

    def load_meta(self) -> IndexMeta:
        if not self.meta_path.is_file():
            raise IndexNotFoundError(self._missing_message(), str(self._index_dir))
        try:
            return IndexMeta.model_validate_json(self.meta_path.read_bytes())
        except ValidationError as exc:
            raise CorruptIndexError(self._corrupt_message(META_FILE, exc), str(self._index_dir)) from exc

    def load(self) -> CodebaseIndex:
        if not self.exists():
            raise IndexNotFoundError(self._missing_message(), str(self._index_dir))

        meta = self.load_meta()
        try:
            entries = _ENTRIES.validate_json(self.index_path.read_bytes())
        except ValidationError as exc:
            raise CorruptIndexError(self._corrupt_message(INDEX_FILE, exc), str(self._index_dir)) from exc

        # File reads go through the directory the store lives in, so a moved
        # checkout keeps working without a rescan.
        return CodebaseIndex(
            root=str(self._root.resolve()),
            entries=entries,
            scanned_at=meta.scanned_at,
        )

    def _missing_message(self) -> str:
        return f"no index found in {self._index_dir}; run 'codenav scan' first"

    @staticmethod
    def _corrupt_message(name: str, exc: ValidationError) -> str:
        return f"index file {name} is corrupt ({exc.error_count()} errors); rescan required"


def find_index_root(start: Path, store_dir: str = DEFAULT_STORE_DIR) -> Path:
    """Walk up from ``start`` to the nearest directory holding an index."""
    current = Path(start).absolute()
    for candidate in (current, *current.parents):
        if (candidate / store_dir / "index" / META_FILE).is_file():
            return candidate
    raise IndexNotFoundError(f"no index found in {current} or any parent; run 'codenav scan' first")


def locate_store(root: Optional[Path], store_dir: str = DEFAULT_STORE_DIR) -> IndexStore:
    """Store at ``root`` if given, else the nearest one above the working directory."""
    if root is None:
        root = find_index_root(Path.cwd(), store_dir)
    return IndexStore(root, store_dir)
