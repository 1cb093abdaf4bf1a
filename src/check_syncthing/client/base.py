"""
Base classes for Syncthing API clients.

Defines the abstract interface the checks consume and the error raised by
every implementation.
"""

from abc import ABC, abstractmethod

from check_syncthing.core.models import (
    Device,
    DeviceStatistics,
    FileError,
    Folder,
    FolderCompletion,
    LogLine,
    SystemStatus,
)


class SyncthingAPIError(Exception):
    """Failed request to the Syncthing REST API."""


class SyncthingAPI(ABC):
    """Abstract base class for Syncthing REST API clients."""

    @abstractmethod
    def health(self) -> str:
        """
        Query the liveness endpoint.

        Returns:
            Reported status string ("OK" when healthy)
        """
        pass

    @abstractmethod
    def system_errors(self) -> list[LogLine]:
        """Get outstanding system errors, oldest first."""
        pass

    @abstractmethod
    def system_status(self) -> SystemStatus:
        """Get system status of the queried daemon."""
        pass

    @abstractmethod
    def devices(self) -> list[Device]:
        """Get configured devices."""
        pass

    @abstractmethod
    def folders(self) -> list[Folder]:
        """Get configured folders."""
        pass

    @abstractmethod
    def folder_errors(self, folder: str) -> list[FileError]:
        """
        Get file errors of a folder.

        Args:
            folder: Folder ID

        Returns:
            List of file errors, most recent last
        """
        pass

    @abstractmethod
    def completion(self, folder: str, device: str) -> FolderCompletion:
        """
        Get completion of a folder on a device.

        Args:
            folder: Folder ID
            device: Device ID
        """
        pass

    @abstractmethod
    def device_stats(self) -> dict[str, DeviceStatistics]:
        """Get per-device statistics keyed by device ID."""
        pass
