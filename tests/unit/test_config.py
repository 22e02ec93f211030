"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from codenav.core.config import (
    CodeNavConfig,
    IndexingConfig,
    LoggingConfig,
    QueryConfig,
    load_config,
)


class TestDefaults:
    def test_defaults(self):
        config = CodeNavConfig()
        assert config.indexing.store_dir == ".codenav"
        assert config.indexing.ignore_file == ".codenavignore"
        assert config.indexing.max_file_size == 1_000_000
        assert config.query.impact_depth == 3
        assert config.query.impact_max == 100
        assert config.query.dead_code_max == 50
        assert config.query.locate_max == 20
        assert config.query.test_map_max == 500
        assert config.logging.level == "WARNING"

    def test_missing_file_yields_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config.query.max_results == 20


class TestYamlLoading:
    def test_sections_loaded(self, tmp_path):
        path = tmp_path / ".codenav.yaml"
        path.write_text(
            "indexing:\n"
            "  store_dir: .nav\n"
            "  exclude_patterns: ['*.gen.go']\n"
            "query:\n"
            "  max_refs: 5\n"
            "logging:\n"
            "  level: debug\n"
            "  json: true\n"
        )
        config = load_config(path)

        assert config.indexing.store_dir == ".nav"
        assert config.indexing.exclude_patterns == ["*.gen.go"]
        assert config.query.max_refs == 5
        assert config.logging.level == "DEBUG"
        assert config.logging.json_format is True

    def test_env_var_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NAV_STORE", ".custom")
        path = tmp_path / "cfg.yaml"
        path.write_text("indexing:\n  store_dir: ${NAV_STORE}\n")
        assert load_config(path).indexing.store_dir == ".custom"

    def test_cached_until_modified(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("query:\n  max_results: 7\n")
        assert load_config(path) is load_config(path)

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("CODENAV_QUERY__MAX_REFS", "9")
        assert CodeNavConfig().query.max_refs == 9


class TestValidation:
    def test_store_dir_must_be_single_name(self):
        with pytest.raises(ValidationError):
            IndexingConfig(store_dir="a/b")

    def test_non_positive_limits_rejected(self):
        with pytest.raises(ValidationError):
            QueryConfig(max_results=0)
        with pytest.raises(ValidationError):
            QueryConfig(complexity_max=-1)

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")
