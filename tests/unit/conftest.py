"""Shared fixtures for unit tests."""

import logging
from pathlib import Path

import pytest

from codenav.core.config import CodeNavConfig, clear_config_cache
from codenav.indexing import IndexQuery, build_default_registry, scan
from codenav.utils.rich_logging import ROOT_LOGGER_NAME


def write_files(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture(autouse=True)
def _reset_codenav_logger():
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def make_project(tmp_path):
    """Write ``{relative_path: content}`` under a fresh project root."""

    def _make(files: dict[str, str]) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        return write_files(root, files)

    return _make


@pytest.fixture
def make_query(make_project, registry):
    """Scan a project written from ``files`` and return an IndexQuery over it."""

    def _make(files: dict[str, str], config: CodeNavConfig | None = None) -> IndexQuery:
        root = make_project(files)
        config = config or CodeNavConfig()
        index = scan(root, registry, config)
        return IndexQuery(index, registry, config)

    return _make
