"""Configuration loading and validation."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".codenav.yaml"


class IndexingConfig(BaseModel):
    """Scan and store settings."""
    store_dir: str = ".codenav"
    ignore_file: str = ".codenavignore"
    # Extra directory names pruned on top of the built-in noise set
    skip_dirs: List[str] = Field(default_factory=list)
    exclude_patterns: List[str] = Field(default_factory=list)
    max_file_size: int = 1_000_000  # Larger files get a file entry but no symbols

    @field_validator('store_dir')
    @classmethod
    def validate_store_dir(cls, v: str) -> str:
        if not v or "/" in v.strip("/") or v in (".", ".."):
            raise ValueError(f"store_dir must be a single directory name, got '{v}'")
        return v.strip("/")

    @field_validator('max_file_size')
    @classmethod
    def validate_max_file_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_file_size must be >= 1, got {v}")
        return v


class QueryConfig(BaseModel):
    """Default result limits for query commands."""
    max_results: int = 20
    max_search_results: int = 50
    max_refs: int = 50
    impact_depth: int = 3
    impact_max: int = 100
    dead_code_max: int = 50
    symbols_max: int = 50
    locate_max: int = 20
    todos_max: int = 100
    entry_points_max: int = 100
    complexity_max: int = 20
    test_map_max: int = 500

    @field_validator(
        'max_results', 'max_search_results', 'max_refs',
        'impact_depth', 'impact_max', 'dead_code_max', 'symbols_max',
        'locate_max', 'todos_max', 'entry_points_max', 'complexity_max', 'test_map_max',
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"query limits must be >= 1, got {v}")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file: Optional[Path] = None
    json_format: bool = Field(default=False, alias="json")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class CodeNavConfig(BaseSettings):
    """Main codenav configuration."""
    indexing: IndexingConfig = Field(default_factory=IndexingConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="CODENAV_",
        env_nested_delimiter="__",
        extra="ignore",
    )


# Module-level mtime-based config cache: path -> (parsed_config, file_mtime)
_config_cache: Dict[str, tuple] = {}


def _get_cached_or_load(resolved_path: Path, loader):
    """Return cached config if file mtime unchanged, else reload."""
    key = str(resolved_path)
    try:
        current_mtime = resolved_path.stat().st_mtime
    except FileNotFoundError:
        _config_cache.pop(key, None)
        return None

    cached = _config_cache.get(key)
    if cached is not None:
        cached_result, cached_mtime = cached
        if cached_mtime == current_mtime:
            return cached_result

    result = loader(resolved_path)
    _config_cache[key] = (result, current_mtime)
    return result


def _load_config_from_file(config_path: Path) -> CodeNavConfig:
    """Internal loader for codenav config (no caching)."""
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"config file {config_path} must contain a mapping, got {type(data).__name__}")

    data = _expand_env_vars(data)
    return CodeNavConfig(**data)


def load_config(config_path: Path = Path(DEFAULT_CONFIG_FILE)) -> CodeNavConfig:
    """Load codenav configuration from a YAML file.

    Uses mtime-based caching: returns the cached config if the file hasn't changed.
    A missing file yields defaults (environment overrides still apply).
    """
    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}. Using default configuration.")
        return CodeNavConfig()

    resolved = config_path.resolve()
    result = _get_cached_or_load(resolved, _load_config_from_file)
    return result if result is not None else CodeNavConfig()


def clear_config_cache() -> None:
    """Clear the module-level config cache. Useful for tests."""
    _config_cache.clear()


def _expand_env_vars(data: Any, _path: str = "") -> Any:
    """Recursively expand ${VAR} references in config data.

    Args:
        data: Config data to process
        _path: Internal tracking for error messages (e.g., "indexing.store_dir")
    """
    if isinstance(data, dict):
        return {k: _expand_env_vars(v, f"{_path}.{k}" if _path else k) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item, f"{_path}[{i}]") for i, item in enumerate(data)]
    elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        env_var = data[2:-1]
        value = os.environ.get(env_var)
        if value is None:
            logger.warning(
                f"Environment variable '{env_var}' not set (referenced at config path: {_path or 'root'}). "
                f"The literal string '{data}' will be used."
            )
            return data
        return value
    return data
