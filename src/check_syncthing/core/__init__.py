"""
Core components for check_syncthing.

Provides configuration, API data models, and duration helpers.
"""

from check_syncthing.core.config import (
    CheckSettings,
    Config,
    ConfigError,
    load_config,
    validate_url,
)
from check_syncthing.core.durations import (
    format_duration,
    format_time,
    parse_duration,
)
from check_syncthing.core.models import (
    Device,
    DeviceStatistics,
    FileError,
    Folder,
    FolderCompletion,
    LogLine,
    SystemStatus,
)

__all__ = [
    "CheckSettings",
    "Config",
    "ConfigError",
    "load_config",
    "validate_url",
    "format_duration",
    "format_time",
    "parse_duration",
    "Device",
    "DeviceStatistics",
    "FileError",
    "Folder",
    "FolderCompletion",
    "LogLine",
    "SystemStatus",
]
