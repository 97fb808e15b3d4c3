"""Unit tests for decoder configuration."""

import pytest
import yaml

from beacon_inspector.errors import ConfigurationError
from beacon_inspector.providers.config import ConfigManager, DecoderConfig, load_config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove configuration environment variables."""
    for name in ("PROVIDERS", "FORMAT", "LOG_LEVEL"):
        monkeypatch.delenv(f"BEACON_INSPECTOR_{name}", raising=False)


class TestDecoderConfig:
    """Test DecoderConfig model."""

    def test_defaults(self):
        """Test default configuration values."""
        config = DecoderConfig()

        assert config.enabled_providers == []
        assert config.output_format == "json"
        assert config.log_level == "WARNING"

    def test_invalid_output_format(self):
        """Test unknown output formats are rejected."""
        with pytest.raises(ValueError):
            DecoderConfig(output_format="xml")

    def test_normalizes_case(self):
        """Test format and level are normalized."""
        config = DecoderConfig(output_format="YAML", log_level="debug")
        assert config.output_format == "yaml"
        assert config.log_level == "DEBUG"

    def test_providers_from_string(self):
        """Test comma-separated provider lists."""
        config = DecoderConfig(enabled_providers="GA4, ADOBEANALYTICS,")
        assert config.enabled_providers == ["GA4", "ADOBEANALYTICS"]


class TestConfigManager:
    """Test ConfigManager loading."""

    def test_load_without_file(self):
        """Test loading defaults with no config file."""
        config = ConfigManager().load_config()
        assert config == DecoderConfig()

    def test_load_from_yaml(self, tmp_path):
        """Test loading a YAML configuration file."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "enabled_providers": ["GA4"],
            "output_format": "text",
        }))

        config = ConfigManager(path).load_config()

        assert config.enabled_providers == ["GA4"]
        assert config.output_format == "text"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        """Test environment variables take precedence over the file."""
        path = tmp_path / "config.yaml"
        path.write_text("output_format: text\n")
        monkeypatch.setenv("BEACON_INSPECTOR_FORMAT", "yaml")
        monkeypatch.setenv("BEACON_INSPECTOR_PROVIDERS", "ADOBEANALYTICS,ADOBETARGET")

        config = ConfigManager(path).load_config()

        assert config.output_format == "yaml"
        assert config.enabled_providers == ["ADOBEANALYTICS", "ADOBETARGET"]

    def test_overrides_take_precedence(self, monkeypatch):
        """Test explicit overrides beat environment variables."""
        monkeypatch.setenv("BEACON_INSPECTOR_LOG_LEVEL", "INFO")

        manager = ConfigManager()
        manager.set_override("log_level", "ERROR")

        assert manager.get_config().log_level == "ERROR"

    def test_missing_file(self, tmp_path):
        """Test a missing config file raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ConfigManager(tmp_path / "missing.yaml").load_config()

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML raises ConfigurationError."""
        path = tmp_path / "config.yaml"
        path.write_text("output_format: [unclosed\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()

    def test_non_mapping_yaml(self, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- GA4\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()

    def test_invalid_values(self, tmp_path):
        """Test invalid values raise ConfigurationError."""
        path = tmp_path / "config.yaml"
        path.write_text("log_level: LOUD\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()

    def test_validate_config(self):
        """Test validation without loading."""
        manager = ConfigManager()
        assert manager.validate_config({"output_format": "json"}) == []
        assert len(manager.validate_config({"output_format": "xml"})) == 1

    def test_default_config_keys(self, tmp_path):
        """Test the written defaults hold only decoder settings."""
        path = tmp_path / "config.yaml"
        ConfigManager().create_default_config(path)

        data = yaml.safe_load(path.read_text())
        assert set(data) == {"enabled_providers", "output_format", "log_level"}

    def test_create_default_config(self, tmp_path):
        """Test writing and reloading the default configuration."""
        path = tmp_path / "nested" / "config.yaml"
        ConfigManager().create_default_config(path)

        assert path.exists()
        assert ConfigManager(path).load_config() == DecoderConfig()


def test_load_config_ignores_none_overrides(monkeypatch):
    """Test None overrides leave lower-precedence values in place."""
    monkeypatch.setenv("BEACON_INSPECTOR_FORMAT", "text")

    config = load_config(None, output_format=None, log_level="INFO")

    assert config.output_format == "text"
    assert config.log_level == "INFO"
