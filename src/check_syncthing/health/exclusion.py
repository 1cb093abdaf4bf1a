"""
Device identifier helpers and the device exclusion filter.
"""

import threading
from collections.abc import Iterable, Mapping

from check_syncthing.core.models import Device

DEVICE_ID_SEPARATOR = "-"


def short_device_id(device_id: str) -> str:
    """Get the short form of a device ID (up to the first separator)."""
    return device_id.split(DEVICE_ID_SEPARATOR, 1)[0]


def device_name(device_id: str, name: str) -> str:
    """Format a device for display, e.g. "ABCDEF1 (laptop)"."""
    return f"{short_device_id(device_id)} ({name})"


class DeviceExclusionFilter:
    """
    Set of devices excluded from checks.

    Devices are matched by short ID. The first time an excluded device is
    looked up, its full ID is recorded so the report can list which
    exclusions actually took effect.
    """

    def __init__(self, device_ids: Iterable[str] = ()):
        """
        Initialize filter.

        Args:
            device_ids: Full or short IDs of devices to exclude
        """
        self._lock = threading.Lock()
        self._devices: dict[str, bool] = {}
        self._excluded: list[str] = []
        for device_id in device_ids:
            self.add(device_id)

    def add(self, device_id: str) -> None:
        """Add a device to the filter."""
        with self._lock:
            self._devices[short_device_id(device_id)] = False

    def contains(self, device_id: str) -> bool:
        """
        Check if a device is excluded, recording the first match.

        Args:
            device_id: Full device ID

        Returns:
            True if the device's short ID is in the filter
        """
        short_id = short_device_id(device_id)
        with self._lock:
            seen = self._devices.get(short_id)
            if seen is None:
                return False
            if not seen:
                self._devices[short_id] = True
                self._excluded.append(device_id)
            return True

    def __contains__(self, device_id: str) -> bool:
        return self.contains(device_id)

    @property
    def referenced(self) -> bool:
        """True if any excluded device was looked up."""
        with self._lock:
            return bool(self._excluded)

    @property
    def excluded(self) -> list[str]:
        """Full IDs of referenced devices in first-reference order."""
        with self._lock:
            return list(self._excluded)

    def summary(self, devices: Mapping[str, Device]) -> str:
        """
        Format referenced devices for the report.

        Args:
            devices: Device directory keyed by full device ID

        Returns:
            Comma separated "SHORTID (name)" entries
        """
        names = []
        for device_id in self.excluded:
            device = devices.get(device_id)
            names.append(device_name(device_id, device.name if device else ""))
        return ", ".join(names)
