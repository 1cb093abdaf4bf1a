"""Unit tests for configuration management."""

import pytest

from check_syncthing.core.config import (
    APIConfig,
    ChecksConfig,
    CheckSettings,
    Config,
    ConfigError,
    load_config,
    validate_url,
)


class TestAPIConfig:
    """Tests for APIConfig dataclass."""

    def test_default_values(self):
        """Test default API configuration."""
        config = APIConfig()
        assert config.url == ""
        assert config.api_key == ""
        assert config.timeout == 15.0


class TestChecksConfig:
    """Tests for ChecksConfig dataclass."""

    def test_default_values(self):
        """Test default check configuration."""
        config = ChecksConfig()
        assert config.exclude_devices == []
        assert config.warn_last_seen == 300
        assert config.crit_last_seen == 900
        assert config.fetch_procs == 8


class TestConfig:
    """Tests for main Config class."""

    def test_default_values(self):
        """Test default configuration values."""
        config = Config()
        assert isinstance(config.api, APIConfig)
        assert isinstance(config.checks, ChecksConfig)
        assert config.log_level == "WARNING"

    def test_from_dict_empty(self):
        """Test creating config from empty dict uses defaults."""
        config = Config.from_dict({})
        assert config.api.timeout == 15.0
        assert config.checks.warn_last_seen == 300

    def test_from_dict_custom_values(self):
        """Test creating config from dict with custom values."""
        data = {
            "api": {
                "url": "http://127.0.0.1:8384",
                "api_key": "secret",
                "timeout": "30s",
            },
            "checks": {
                "exclude_devices": ["AAAAAAA"],
                "warn_last_seen": "10m",
                "crit_last_seen": "1h",
                "fetch_procs": 4,
            },
            "log_level": "DEBUG",
        }
        config = Config.from_dict(data)

        assert config.api.url == "http://127.0.0.1:8384"
        assert config.api.api_key == "secret"
        assert config.api.timeout == 30.0
        assert config.checks.exclude_devices == ["AAAAAAA"]
        assert config.checks.warn_last_seen == 600
        assert config.checks.crit_last_seen == 3600
        assert config.checks.fetch_procs == 4
        assert config.log_level == "DEBUG"

    def test_from_dict_invalid_duration(self):
        """Test malformed durations raise ConfigError."""
        with pytest.raises(ConfigError, match="invalid configuration"):
            Config.from_dict({"checks": {"warn_last_seen": "soon"}})

    def test_from_dict_empty_sections(self):
        """Test sections left empty in YAML fall back to defaults."""
        config = Config.from_dict({"api": None, "checks": {"warn_last_seen": "5m"}})
        assert config.api.url == ""
        assert config.checks.warn_last_seen == 300

    def test_from_dict_section_not_mapping(self):
        with pytest.raises(ConfigError, match="api must be a mapping"):
            Config.from_dict({"api": ["http://127.0.0.1:8384"]})

    def test_from_dict_not_mapping(self):
        with pytest.raises(ConfigError, match="expected a mapping"):
            Config.from_dict(["a", "b"])

    def test_exclude_devices_scalar(self):
        """Test a single excluded device may be given without a list."""
        config = Config.from_dict({"checks": {"exclude_devices": "ABCDEF1"}})
        assert config.checks.exclude_devices == ["ABCDEF1"]

    def test_exclude_devices_invalid(self):
        with pytest.raises(ConfigError, match="exclude_devices must be a list"):
            Config.from_dict({"checks": {"exclude_devices": {"a": 1}}})

    def test_fetch_procs_must_be_positive(self):
        """Test a zero fetch concurrency is rejected at load time."""
        with pytest.raises(ConfigError, match="fetch_procs must be positive: 0"):
            Config.from_dict({"checks": {"fetch_procs": 0}})

    def test_check_settings(self):
        """Test check settings are an immutable snapshot."""
        config = Config()
        config.checks.exclude_devices = ["AAAAAAA"]

        settings = config.check_settings()
        config.checks.exclude_devices.append("BBBBBBB")

        assert settings == CheckSettings(exclude_devices=("AAAAAAA",))


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self, tmp_path):
        """Test loading config with no file returns defaults."""
        config = load_config(dotenv_path=tmp_path / "missing.env")
        assert isinstance(config, Config)
        assert config.api.url == ""

    def test_load_from_explicit_path(self, tmp_path):
        """Test loading config from explicit path."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
api:
  url: http://sync.example.com:8384
checks:
  exclude_devices:
    - AAAAAAA
log_level: INFO
"""
        )
        config = load_config(config_file)
        assert config.api.url == "http://sync.example.com:8384"
        assert config.checks.exclude_devices == ["AAAAAAA"]
        assert config.log_level == "INFO"

    def test_load_from_env_path(self, tmp_path, monkeypatch):
        """Test CHECK_SYNCTHING_CONFIG points at the config file."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("api:\n  api_key: from-file\n")
        monkeypatch.setenv("CHECK_SYNCTHING_CONFIG", str(config_file))

        config = load_config()
        assert config.api.api_key == "from-file"

    def test_invalid_yaml(self, tmp_path):
        """Test unparsable YAML raises ConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("api: [unclosed\n")

        with pytest.raises(ConfigError, match="load config"):
            load_config(config_file)

    def test_top_level_list(self, tmp_path):
        """Test a config file that is not a mapping raises ConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="expected a mapping"):
            load_config(config_file)

    def test_env_override_url_and_key(self, monkeypatch):
        """Test SYNCTHING_URL and SYNCTHING_API_KEY overrides."""
        monkeypatch.setenv("SYNCTHING_URL", "http://localhost:8384")
        monkeypatch.setenv("SYNCTHING_API_KEY", "env-key")

        config = load_config()
        assert config.api.url == "http://localhost:8384"
        assert config.api.api_key == "env-key"

    def test_env_override_timeout(self, monkeypatch):
        monkeypatch.setenv("CHECK_SYNCTHING_TIMEOUT", "3s")
        assert load_config().api.timeout == 3.0

    def test_env_override_invalid_timeout(self, monkeypatch):
        """Test invalid CHECK_SYNCTHING_TIMEOUT is ignored."""
        monkeypatch.setenv("CHECK_SYNCTHING_TIMEOUT", "not-a-duration")
        assert load_config().api.timeout == 15.0  # Default

    def test_env_override_log_level(self, monkeypatch):
        monkeypatch.setenv("CHECK_SYNCTHING_LOG_LEVEL", "DEBUG")
        assert load_config().log_level == "DEBUG"

    def test_dotenv_file(self, tmp_path, monkeypatch):
        """Test variables are read from a .env file."""
        dotenv_file = tmp_path / "check.env"
        dotenv_file.write_text(
            "SYNCTHING_URL=http://dotenv:8384\nSYNCTHING_API_KEY=dotenv-key\n"
        )

        config = load_config(dotenv_path=dotenv_file)

        assert config.api.url == "http://dotenv:8384"
        assert config.api.api_key == "dotenv-key"

    def test_environment_beats_dotenv(self, tmp_path, monkeypatch):
        """Test variables already set are not replaced by .env values."""
        monkeypatch.setenv("SYNCTHING_API_KEY", "env-key")
        dotenv_file = tmp_path / "check.env"
        dotenv_file.write_text("SYNCTHING_API_KEY=dotenv-key\n")

        assert load_config(dotenv_path=dotenv_file).api.api_key == "env-key"


class TestValidateURL:
    """Tests for validate_url."""

    def test_valid(self):
        assert validate_url(" http://127.0.0.1:8384 ") == "http://127.0.0.1:8384"

    def test_empty(self):
        with pytest.raises(ConfigError, match="empty server URL"):
            validate_url("")

    def test_relative(self):
        with pytest.raises(ConfigError, match="not absolute"):
            validate_url("127.0.0.1:8384/rest")
