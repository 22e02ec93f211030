"""Configuration for codenav."""

from .config import (
    CodeNavConfig,
    IndexingConfig,
    LoggingConfig,
    QueryConfig,
    clear_config_cache,
    load_config,
)

__all__ = [
    "CodeNavConfig",
    "IndexingConfig",
    "LoggingConfig",
    "QueryConfig",
    "clear_config_cache",
    "load_config",
]
