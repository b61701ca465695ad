"""Tests for configuration loading and strict mode resolution."""

import pytest

from dyexpr.config import Config, QueryConfig, config_path, load_config, resolve_strict_mode
from dyexpr.errors import ConfigurationError


class TestConfigPath:
    """Tests for locating the configuration file."""

    def test_home_directory(self, tmp_path, monkeypatch):
        """Test the default location under the home directory."""
        monkeypatch.delenv("DYNEIN_CONFIG_DIR", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert config_path() == tmp_path / ".dynein" / "config.yml"

    def test_environment_override(self, tmp_path, monkeypatch):
        """Test that DYNEIN_CONFIG_DIR replaces the home directory."""
        monkeypatch.setenv("DYNEIN_CONFIG_DIR", str(tmp_path / "custom"))

        assert config_path() == tmp_path / "custom" / ".dynein" / "config.yml"


class TestLoadConfig:
    """Tests for reading config.yml."""

    def test_missing_file(self, tmp_path):
        """Test that a missing file gives the defaults."""
        config = load_config(tmp_path / "missing.yml")

        assert config == Config()
        assert config.query.strict_mode is False

    def test_strict_mode(self, tmp_path):
        """Test reading query.strict_mode."""
        path = tmp_path / "config.yml"
        path.write_text("using_region: us-east-1\nquery:\n  strict_mode: true\n")

        assert load_config(path) == Config(query=QueryConfig(strict_mode=True))

    def test_default_location(self, tmp_path, monkeypatch):
        """Test loading from the environment-selected directory."""
        monkeypatch.setenv("DYNEIN_CONFIG_DIR", str(tmp_path))
        (tmp_path / ".dynein").mkdir()
        (tmp_path / ".dynein" / "config.yml").write_text("query:\n  strict_mode: true\n")

        assert load_config().query.strict_mode is True

    def test_empty_file(self, tmp_path):
        """Test that an empty file gives the defaults."""
        path = tmp_path / "config.yml"
        path.write_text("")

        assert load_config(path) == Config()

    def test_empty_query_section(self, tmp_path):
        """Test a query section without settings."""
        path = tmp_path / "config.yml"
        path.write_text("query:\n")

        assert load_config(path) == Config()

    def test_malformed_yaml(self, tmp_path):
        """Test that unparsable YAML is reported."""
        path = tmp_path / "config.yml"
        path.write_text("query: [\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        """Test that the document must be a mapping."""
        path = tmp_path / "config.yml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_invalid_strict_mode(self, tmp_path):
        """Test that strict_mode must be a boolean."""
        path = tmp_path / "config.yml"
        path.write_text("query:\n  strict_mode: maybe\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)

        assert "strict_mode" in str(exc_info.value)

    def test_invalid_query_section(self, tmp_path):
        """Test that query must be a mapping."""
        path = tmp_path / "config.yml"
        path.write_text("query: [1]\n")

        with pytest.raises(ConfigurationError):
            load_config(path)


class TestResolveStrictMode:
    """Tests for combining flags and configuration."""

    def test_defaults_to_non_strict(self):
        """Test the default without flags or configuration."""
        assert resolve_strict_mode() is False

    def test_configuration_decides_without_flags(self):
        """Test that the configuration applies when no flag is given."""
        config = Config(query=QueryConfig(strict_mode=True))

        assert resolve_strict_mode(config=config) is True

    def test_strict_flag(self):
        """Test that --strict wins over the configuration."""
        assert resolve_strict_mode(strict=True, config=Config()) is True

    def test_non_strict_flag_ignores_configuration(self):
        """Test that --non-strict always means non-strict."""
        config = Config(query=QueryConfig(strict_mode=True))

        assert resolve_strict_mode(non_strict=True, config=config) is False

    def test_both_flags(self):
        """Test that the two flags cannot be combined."""
        with pytest.raises(ConfigurationError):
            resolve_strict_mode(strict=True, non_strict=True)
