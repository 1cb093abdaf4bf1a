"""
Configuration management for check_syncthing.

Loads configuration from YAML files with .env and environment variable
overrides.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv

from check_syncthing.core.durations import parse_duration

logger = logging.getLogger(__name__)

# Default configuration paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "check_syncthing"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
SYSTEM_CONFIG_FILE = Path("/etc/check_syncthing/config.yaml")

DEFAULT_TIMEOUT = 15.0
DEFAULT_WARN_LAST_SEEN = 5 * 60.0
DEFAULT_CRIT_LAST_SEEN = 15 * 60.0
DEFAULT_FETCH_PROCS = 8


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass
class APIConfig:
    """Syncthing REST API connection settings."""

    url: str = ""
    api_key: str = ""
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class ChecksConfig:
    """Settings shared by all checks."""

    exclude_devices: list[str] = field(default_factory=list)
    warn_last_seen: float = DEFAULT_WARN_LAST_SEEN
    crit_last_seen: float = DEFAULT_CRIT_LAST_SEEN
    fetch_procs: int = DEFAULT_FETCH_PROCS


@dataclass(frozen=True)
class CheckSettings:
    """Immutable settings injected into every check flow."""

    exclude_devices: tuple[str, ...] = ()
    warn_last_seen: float = DEFAULT_WARN_LAST_SEEN
    crit_last_seen: float = DEFAULT_CRIT_LAST_SEEN
    fetch_procs: int = DEFAULT_FETCH_PROCS


@dataclass
class Config:
    """Main configuration for check_syncthing."""

    api: APIConfig = field(default_factory=APIConfig)
    checks: ChecksConfig = field(default_factory=ChecksConfig)
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create Config from dictionary.

        Raises:
            ConfigError: If a section or value has the wrong shape
        """
        if not isinstance(data, dict):
            raise ConfigError("invalid configuration: expected a mapping")
        api_data = _section(data, "api")
        checks_data = _section(data, "checks")

        exclude_devices = checks_data.get("exclude_devices") or []
        if isinstance(exclude_devices, str):
            exclude_devices = [exclude_devices]
        elif not isinstance(exclude_devices, list):
            raise ConfigError(
                "invalid configuration: checks.exclude_devices must be a list"
            )

        try:
            api = APIConfig(
                url=str(api_data.get("url") or ""),
                api_key=str(api_data.get("api_key") or ""),
                timeout=parse_duration(api_data.get("timeout", DEFAULT_TIMEOUT)),
            )
            checks = ChecksConfig(
                exclude_devices=[str(device_id) for device_id in exclude_devices],
                warn_last_seen=parse_duration(
                    checks_data.get("warn_last_seen", DEFAULT_WARN_LAST_SEEN)
                ),
                crit_last_seen=parse_duration(
                    checks_data.get("crit_last_seen", DEFAULT_CRIT_LAST_SEEN)
                ),
                fetch_procs=int(checks_data.get("fetch_procs", DEFAULT_FETCH_PROCS)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid configuration: {e}") from e

        if checks.fetch_procs < 1:
            raise ConfigError(
                f"invalid configuration: checks.fetch_procs must be positive: "
                f"{checks.fetch_procs}"
            )

        return cls(api=api, checks=checks, log_level=data.get("log_level", "WARNING"))

    def check_settings(self) -> CheckSettings:
        """Freeze the check-related part of the configuration."""
        return CheckSettings(
            exclude_devices=tuple(self.checks.exclude_devices),
            warn_last_seen=self.checks.warn_last_seen,
            crit_last_seen=self.checks.crit_last_seen,
            fetch_procs=self.checks.fetch_procs,
        )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Get a config section; an empty section counts as missing."""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"invalid configuration: {name} must be a mapping")
    return section


def load_config(
    config_path: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
) -> Config:
    """
    Load configuration from YAML file.

    Search order:
    1. Explicit path if provided
    2. CHECK_SYNCTHING_CONFIG environment variable
    3. ~/.config/check_syncthing/config.yaml
    4. /etc/check_syncthing/config.yaml
    5. Default values

    A .env file is loaded first; variables already set in the environment
    take precedence over it.

    Environment variable overrides:
    - SYNCTHING_URL: Override api.url
    - SYNCTHING_API_KEY: Override api.api_key
    - CHECK_SYNCTHING_TIMEOUT: Override api.timeout
    - CHECK_SYNCTHING_LOG_LEVEL: Override log_level

    Args:
        config_path: Optional explicit path to config file
        dotenv_path: Optional explicit path to .env file

    Returns:
        Loaded configuration

    Raises:
        ConfigError: If the file cannot be read or has the wrong shape
    """
    load_dotenv(dotenv_path or Path.cwd() / ".env")

    # Determine config file path
    if config_path:
        paths_to_try = [config_path]
    else:
        env_path = os.environ.get("CHECK_SYNCTHING_CONFIG")
        paths_to_try = []
        if env_path:
            paths_to_try.append(Path(env_path))
        paths_to_try.extend([DEFAULT_CONFIG_FILE, SYSTEM_CONFIG_FILE])

    # Try to load from file
    config_data = {}
    for path in paths_to_try:
        if path.exists():
            try:
                with open(path) as f:
                    config_data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"load config {path}: {e}") from e
            if not isinstance(config_data, dict):
                raise ConfigError(f"load config {path}: expected a mapping")
            break

    config = Config.from_dict(config_data)
    return _apply_env_overrides(config)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    if os.environ.get("SYNCTHING_URL"):
        config.api.url = os.environ["SYNCTHING_URL"]

    if os.environ.get("SYNCTHING_API_KEY"):
        config.api.api_key = os.environ["SYNCTHING_API_KEY"]

    if "CHECK_SYNCTHING_TIMEOUT" in os.environ:
        try:
            config.api.timeout = parse_duration(os.environ["CHECK_SYNCTHING_TIMEOUT"])
        except ValueError as e:
            logger.warning(f"Ignoring CHECK_SYNCTHING_TIMEOUT: {e}")

    if "CHECK_SYNCTHING_LOG_LEVEL" in os.environ:
        config.log_level = os.environ["CHECK_SYNCTHING_LOG_LEVEL"]

    return config


def validate_url(url: str) -> str:
    """
    Validate the Syncthing server URL.

    Args:
        url: Base URL of the Syncthing GUI/REST endpoint

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        ConfigError: If the URL is empty or not absolute
    """
    url = url.strip()
    if not url:
        raise ConfigError("empty server URL")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ConfigError(f"validate {url!r}: {e}") from e

    if not parsed.scheme or not parsed.netloc:
        raise ConfigError(f"url {url!r} not absolute")
    return url
