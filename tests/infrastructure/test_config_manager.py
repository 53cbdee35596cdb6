#!/usr/bin/env python3
"""Tests for the ConfigManager module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from fileiter.core.constants import ErrorCode
from fileiter.core.errors import ConfigurationError
from fileiter.infrastructure.config_manager import (
    ConfigManager,
    ConfigSource,
    ConfigValue,
    get_config_manager,
    set_global_config,
)


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        """Test config source precedence ordering."""
        sources = [
            ConfigSource.COMPILED_DEFAULTS,
            ConfigSource.USER_CONFIG,
            ConfigSource.ENVIRONMENT,
            ConfigSource.CLI_ARGS,
            ConfigSource.RUNTIME,
        ]
        for i in range(len(sources) - 1):
            assert sources[i].value < sources[i + 1].value


class TestConfigManager:
    """Tests for ConfigManager class."""

    @pytest.fixture
    def manager(self):
        """Create test config manager without environment overrides."""
        return ConfigManager(load_environment=False)

    def test_defaults(self, manager):
        """Test compiled defaults are present."""
        assert manager.get("fileiter.logging.level") == "INFO"
        assert manager.get_entities() == []
        assert manager.get_variables() == {}

    def test_load_file(self, manager, config_file: Path, scan_dir: Path):
        """Test loading a data-config file."""
        manager.load_file(str(config_file))

        assert manager.get("fileiter.logging.level") == "DEBUG"
        entity = manager.get_entity("logs")
        assert entity["baseDir"] == str(scan_dir)
        assert manager.get_variables()["dih"]["minimum_size"] == 10

    def test_load_file_missing(self, manager, temp_dir: Path):
        """Test a missing file is reported as not found."""
        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_file(str(temp_dir / "nope.yaml"))
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_load_file_invalid_yaml(self, manager, temp_dir: Path):
        """Test YAML syntax errors are configuration errors."""
        path = temp_dir / "bad.yaml"
        path.write_text("fileiter: [unclosed\n")
        with pytest.raises(ConfigurationError, match="YAML parse error"):
            manager.load_file(str(path))

    def test_load_file_not_mapping(self, manager, temp_dir: Path):
        """Test a non-mapping document is rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="Invalid config format"):
            manager.load_file(str(path))

    def test_load_dict_wraps_root(self, manager):
        """Test documents without the fileiter key are wrapped."""
        manager.load_dict({"logging": {"level": "WARNING"}})
        assert manager.get("fileiter.logging.level") == "WARNING"

    def test_load_dict_validates_entities(self, manager):
        """Test entity structure is validated on load."""
        with pytest.raises(ConfigurationError, match="index 0"):
            manager.load_dict({"entities": [{"baseDir": "/tmp"}]})

    def test_load_dict_entities_must_be_list(self, manager):
        """Test entities must be a list."""
        with pytest.raises(ConfigurationError, match="must be a list"):
            manager.load_dict({"entities": {"name": "x"}})

    def test_load_dict_validates_data_sources(self, manager):
        """Test data source structure is validated on load."""
        with pytest.raises(ConfigurationError):
            manager.load_dict({"data_sources": ["a"]})

    def test_precedence(self, manager):
        """Test higher sources win."""
        manager.load_dict({"logging": {"level": "WARNING"}}, ConfigSource.USER_CONFIG)
        manager.set("fileiter.logging.level", "DEBUG", ConfigSource.CLI_ARGS)
        assert manager.get("fileiter.logging.level") == "DEBUG"

        value = manager.get_value("fileiter.logging.level")
        assert isinstance(value, ConfigValue)
        assert value.source == ConfigSource.CLI_ARGS

    def test_get_default(self, manager):
        """Test default is returned for missing keys."""
        assert manager.get("fileiter.nothing.here", default=42) == 42
        assert manager.get_value("fileiter.nothing") is None

    def test_get_all_deep_merges(self, manager):
        """Test merged view keeps keys from every layer."""
        manager.load_dict({"logging": {"file": "/tmp/x.log"}}, ConfigSource.USER_CONFIG)
        merged = manager.get_all()
        assert merged["fileiter"]["logging"] == {"level": "INFO", "file": "/tmp/x.log"}

    def test_unknown_entity(self, manager):
        """Test looking up an unknown entity."""
        with pytest.raises(ConfigurationError, match="Unknown entity"):
            manager.get_entity("missing")

    def test_get_data_source(self, manager):
        """Test looking up data sources by name."""
        manager.load_dict({"data_sources": {"src": {"basePath": "/data"}}})
        assert manager.get_data_source("src") == {"basePath": "/data"}
        with pytest.raises(ConfigurationError, match="Unknown data source"):
            manager.get_data_source("other")

    def test_environment(self):
        """Test FILEITER_* variables override the file."""
        with patch.dict("os.environ", {"FILEITER_LOGGING_LEVEL": "ERROR"}):
            manager = ConfigManager()
        assert manager.get("fileiter.logging.level") == "ERROR"

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("no", False), ("10", 10), ("1.5", 1.5), ("DEBUG", "DEBUG")],
    )
    def test_parse_env_value(self, manager, raw, expected):
        """Test environment values are typed."""
        assert manager._parse_env_value(raw) == expected

    def test_clear(self, manager):
        """Test clearing keeps compiled defaults."""
        manager.load_dict({"logging": {"level": "DEBUG"}})
        manager.clear()
        assert manager.get("fileiter.logging.level") == "INFO"


class TestGlobalConfig:
    """Tests for module-level accessors."""

    def test_get_config_manager_is_cached(self):
        """Test the global manager is created once."""
        assert get_config_manager() is get_config_manager()

    def test_set_global_config(self):
        """Test replacing the global manager."""
        manager = ConfigManager(load_environment=False)
        set_global_config(manager)
        assert get_config_manager() is manager
