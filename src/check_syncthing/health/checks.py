"""
Check flow implementations.

Provides the shared check state machine and the daemon health check.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, MutableSequence, Sequence
from enum import Enum
from typing import Any, Optional

from check_syncthing.client.base import SyncthingAPI, SyncthingAPIError
from check_syncthing.core.config import CheckSettings
from check_syncthing.core.durations import format_time
from check_syncthing.core.models import (
    Device,
    FileError,
    Folder,
    LogLine,
    SystemStatus,
)
from check_syncthing.health.exclusion import DeviceExclusionFilter, device_name
from check_syncthing.health.fetch import FetchTask, run_bounded
from check_syncthing.health.status import Severity, StatusAccumulator

logger = logging.getLogger(__name__)

HEALTH_OK_MESSAGE = "syncthing server alive: "


class CheckState(Enum):
    """Lifecycle of a check run."""

    INIT = "init"
    FETCHING = "fetching"
    FAILED = "failed"
    EVALUATING = "evaluating"
    DONE = "done"


def folder_name(folder: Folder) -> str:
    """Format a folder for display, e.g. "default (Default Folder)"."""
    return f"{folder.id} ({folder.label})"


class CheckFlow(ABC):
    """
    Base class for checks.

    A run fetches everything it needs from the API in one or more bounded
    rounds, then evaluates the fetched snapshot. Any fetch failure is
    CRITICAL and ends the run before evaluation.
    """

    default_ok_message = ""

    def __init__(
        self,
        client: SyncthingAPI,
        settings: Optional[CheckSettings] = None,
    ):
        """
        Initialize check.

        Args:
            client: Syncthing API client
            settings: Check settings (defaults if omitted)
        """
        self.client = client
        self.settings = settings or CheckSettings()
        self.status = StatusAccumulator(self.default_ok_message)
        self.exclude_devices = DeviceExclusionFilter(self.settings.exclude_devices)
        self.state = CheckState.INIT
        self.devices: dict[str, Device] = {}

    def run(self) -> "CheckFlow":
        """
        Run the check once.

        Returns:
            self, for chaining with output()
        """
        if self.state != CheckState.INIT:
            raise RuntimeError(f"{self.__class__.__name__} has already run")

        self.state = CheckState.FETCHING
        if not self.fetch():
            self.state = CheckState.FAILED
            logger.debug(f"{self.__class__.__name__}: fetch failed")
            return self

        self.state = CheckState.EVALUATING
        self.evaluate()
        self.state = CheckState.DONE
        return self

    @abstractmethod
    def fetch(self) -> bool:
        """
        Fetch data needed by the check.

        Returns:
            True if everything was fetched and evaluation can proceed
        """
        pass

    @abstractmethod
    def evaluate(self) -> None:
        """Apply the check's rules to the fetched data."""
        pass

    def output(self) -> str:
        """Render plugin output."""
        return self.status.render()

    @property
    def severity(self) -> Severity:
        return self.status.severity

    def fetch_round(
        self,
        tasks: Sequence[FetchTask],
        results: MutableSequence[Any],
    ) -> bool:
        """
        Run one fetch round, escalating its error to CRITICAL.

        Returns:
            True if the check is still OK afterwards
        """
        err = run_bounded(tasks, results, self.settings.fetch_procs)
        self.status.escalate_on_error(err, Severity.CRITICAL)
        return self.status.severity == Severity.OK

    def set_devices(self, devices: Iterable[Device]) -> None:
        """Index the device directory by device ID."""
        self.devices = {device.device_id: device for device in devices}

    def device_name(self, device_id: str) -> str:
        device = self.devices.get(device_id)
        return device_name(device_id, device.name if device else "")

    def folder_errors_task(self, folder: Folder) -> FetchTask:
        """Create a fetch task for the file errors of a folder."""

        def fetch() -> list[FileError]:
            try:
                return self.client.folder_errors(folder.id)
            except SyncthingAPIError as e:
                raise SyncthingAPIError(
                    f"folder id={folder.id!r}, label={folder.label!r}: {e}"
                ) from e

        return fetch

    def check_folder_errors(
        self,
        folders: Sequence[Folder],
        folder_errors: Sequence[list[FileError]],
    ) -> bool:
        """
        Report folders whose latest file error is set.

        Args:
            folders: Folders in listing order
            folder_errors: File errors per folder, same order as folders

        Returns:
            True if any folder has errors
        """
        with_errors = [
            (folder, errors[-1])
            for folder, errors in zip(folders, folder_errors)
            if errors
        ]
        if not with_errors:
            return False

        self.status.escalate(
            Severity.WARNING,
            f"{len(with_errors)}/{len(folders)} folders with errors",
        )
        for folder, latest in with_errors:
            self.status.escalate(Severity.WARNING, "folder: " + folder_name(folder))
            self.status.escalate(Severity.WARNING, "path: " + latest.path)
            self.status.escalate(Severity.WARNING, "error: " + latest.error)
        return True

    def output_excluded(self) -> None:
        """Add the list of excluded devices, keeping the current severity."""
        if not self.exclude_devices.referenced:
            return
        self.status.escalate(
            self.status.severity,
            "excluded: " + self.exclude_devices.summary(self.devices),
        )


class HealthCheck(CheckFlow):
    """
    Checks the daemon answers, has no system errors and no folder errors.

    In case of errors, reports the last system error and the last error of
    every folder with errors.
    """

    default_ok_message = HEALTH_OK_MESSAGE

    def __init__(
        self,
        client: SyncthingAPI,
        settings: Optional[CheckSettings] = None,
    ):
        super().__init__(client, settings)
        self.system_errors: list[LogLine] = []
        self.system: Optional[SystemStatus] = None
        self.folders: list[Folder] = []
        self.folder_errors: list[list[FileError]] = []

    def fetch(self) -> bool:
        if not self.check_liveness():
            return False

        results: list[Any] = [None] * 4
        tasks = [
            self.client.system_errors,
            self.client.system_status,
            self.client.devices,
            self.client.folders,
        ]
        if not self.fetch_round(tasks, results):
            return False

        self.system_errors, self.system, devices, self.folders = results
        self.set_devices(devices)

        folder_errors: list[Any] = [None] * len(self.folders)
        tasks = [self.folder_errors_task(folder) for folder in self.folders]
        if not self.fetch_round(tasks, folder_errors):
            return False
        self.folder_errors = folder_errors
        return True

    def check_liveness(self) -> bool:
        """
        Probe the health endpoint.

        Returns:
            True if the daemon reported status "OK"
        """
        try:
            status = self.client.health()
        except SyncthingAPIError as e:
            self.status.escalate_on_error(e, Severity.CRITICAL)
            return False

        return not self.status.escalate_if(
            status != "OK",
            Severity.CRITICAL,
            f"health: unexpected status: {status}",
        )

    def evaluate(self) -> None:
        self.status.set_default_ok_message(
            HEALTH_OK_MESSAGE + self.device_name(self.system.my_id)
        )
        if self.system_errors:
            self.check_system_errors()
        self.check_folder_errors(self.folders, self.folder_errors)

    def check_system_errors(self) -> None:
        last_error = self.system_errors[-1]
        self.status.escalate(
            Severity.WARNING,
            f"{len(self.system_errors)} system error(s): {last_error.message}",
        )
        self.status.escalate(
            Severity.WARNING, "last error at: " + format_time(last_error.when)
        )
