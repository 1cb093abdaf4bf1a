"""
Data models for Syncthing REST API responses.

Defines dataclasses for devices, folders, errors, and statistics decoded
from the JSON returned by the daemon.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

# Devices that were never contacted report the Unix epoch (or nothing)
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_FRACTION_RE = re.compile(r"\.(\d+)")


def _microseconds(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value: Optional[str]) -> datetime:
    """
    Parse an RFC 3339 timestamp as sent by Syncthing.

    Syncthing emits up to nanosecond precision with trailing zeros dropped
    and a trailing "Z" for UTC, so the fraction is trimmed or padded to
    exactly six digits before parsing.

    Args:
        value: Timestamp string, or None

    Returns:
        Timezone-aware datetime; EPOCH if value is empty
    """
    if not value:
        return EPOCH

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(_microseconds, text)

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Device:
    """Configured device."""

    device_id: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Device":
        """Create Device from API response item."""
        return cls(
            device_id=data.get("deviceID", ""),
            name=data.get("name", ""),
        )


@dataclass
class Folder:
    """Configured folder and the devices it is shared with."""

    id: str = ""
    label: str = ""
    path: str = ""
    device_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Folder":
        """Create Folder from API response item."""
        return cls(
            id=data.get("id", ""),
            label=data.get("label", ""),
            path=data.get("path", ""),
            device_ids=[d.get("deviceID", "") for d in data.get("devices") or []],
        )


@dataclass
class FileError:
    """Error reported for a single file inside a folder."""

    path: str = ""
    error: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileError":
        """Create FileError from API response item."""
        return cls(path=data.get("path", ""), error=data.get("error", ""))


@dataclass
class FolderCompletion:
    """Completion of a folder on a remote device."""

    completion: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FolderCompletion":
        """Create FolderCompletion from API response."""
        return cls(completion=float(data.get("completion", 0)))


@dataclass
class DeviceStatistics:
    """Per-device statistics."""

    last_seen: datetime = EPOCH

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeviceStatistics":
        """Create DeviceStatistics from API response value."""
        return cls(last_seen=parse_timestamp(data.get("lastSeen")))

    @property
    def never_seen(self) -> bool:
        """Check if the device has never been contacted."""
        return self.last_seen <= EPOCH


@dataclass
class SystemStatus:
    """Subset of the daemon's system status."""

    my_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SystemStatus":
        """Create SystemStatus from API response."""
        # Field name casing differs between Syncthing releases
        return cls(my_id=data.get("myID") or data.get("MyID") or "")


@dataclass
class LogLine:
    """Entry of the daemon's system error log."""

    when: datetime = EPOCH
    message: str = ""
    level: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogLine":
        """Create LogLine from API response item."""
        return cls(
            when=parse_timestamp(data.get("when")),
            message=data.get("message", ""),
            level=data.get("level", 0),
        )
