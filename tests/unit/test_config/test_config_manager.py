"""
Unit tests for the cached configuration singleton.
"""

import pytest

from perfspotter.config import (
    clear_config_cache,
    get_config,
    get_config_path,
    is_config_loaded,
    load_environment,
    set_config_path,
)
from perfspotter.validation import ValidationError


@pytest.mark.unit
class TestConfigManager:
    """Test cases for loading and caching the configuration."""

    def test_load_and_cache(self, config_files):
        """Test that the configuration is loaded once and cached."""
        set_config_path(config_files["config"])

        config = get_config()

        assert is_config_loaded()
        assert get_config() is config
        assert get_config_path() == config_files["config"]
        assert config.workload.max_users == 4
        assert config.broker.thread_name_prefix == "TestSatellite"

    def test_set_config_path_drops_cache(self, config_files, temp_dir):
        """Test that pointing at another file forces a reload."""
        set_config_path(config_files["config"])
        get_config()

        other = temp_dir / "other.toml"
        other.write_text("[workload]\nmax_users = 7\n", encoding="utf-8")
        set_config_path(other)

        assert not is_config_loaded()
        assert get_config().workload.max_users == 7

    def test_clear_config_cache(self, config_files):
        """Test that clearing the cache forces a reload."""
        set_config_path(config_files["config"])
        get_config()

        clear_config_cache()

        assert not is_config_loaded()

    def test_missing_file(self, temp_dir):
        """Test that a missing configuration file raises FileNotFoundError."""
        set_config_path(temp_dir / "missing.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_invalid_file(self, temp_dir):
        """Test that an invalid configuration raises ValidationError."""
        path = temp_dir / "bad.toml"
        path.write_text('[spotter]\nstorage_format = "xml"\n', encoding="utf-8")
        set_config_path(path)

        with pytest.raises(ValidationError):
            get_config()


@pytest.mark.unit
class TestLoadEnvironment:
    """Test cases for load_environment."""

    def test_load_environment(self, config_files):
        """Test that the environment named by the configuration is loaded."""
        set_config_path(config_files["config"])

        environment = load_environment(get_config())

        assert [s.kind for s in environment.satellites] == ["instrumentation", "measurement", "workload"]

    def test_no_environment_file(self, temp_dir):
        """Test that no environment file gives an environment without satellites."""
        path = temp_dir / "spotter.toml"
        path.write_text("[spotter]\n", encoding="utf-8")
        set_config_path(path)

        assert load_environment(get_config()).satellites == []
