"""
Folder status check.

Checks every folder for file errors, remote devices that are out of sync,
and folders not shared with any device.
"""

from typing import Any, Optional

from check_syncthing.client.base import SyncthingAPI
from check_syncthing.core.config import CheckSettings
from check_syncthing.core.durations import format_number
from check_syncthing.core.models import FileError, Folder, FolderCompletion
from check_syncthing.health.checks import CheckFlow, folder_name
from check_syncthing.health.fetch import FetchTask
from check_syncthing.health.status import Severity

FOLDERS_OK_MESSAGE = " syncthing folders"


class FolderStatusCheck(CheckFlow):
    """
    Checks status of syncthing folders.

    Folder errors take precedence: when any folder reports an error, the
    out of sync and not shared rules are skipped for the run.
    """

    default_ok_message = FOLDERS_OK_MESSAGE

    def __init__(
        self,
        client: SyncthingAPI,
        settings: Optional[CheckSettings] = None,
    ):
        super().__init__(client, settings)
        self.folders: list[Folder] = []
        self.folder_errors: list[list[FileError]] = []
        # (device ID, completion) per folder, in folder device order
        self.completions: list[list[tuple[str, FolderCompletion]]] = []

    def fetch(self) -> bool:
        results: list[Any] = [None] * 2
        if not self.fetch_round([self.client.devices, self.client.folders], results):
            return False

        devices, self.folders = results
        self.set_devices(devices)
        return self.fetch_folder_status()

    def fetch_folder_status(self) -> bool:
        """Fetch file errors of every folder and completion of its devices."""
        tasks: list[FetchTask] = [
            self.folder_errors_task(folder) for folder in self.folders
        ]

        pairs: list[tuple[int, str]] = []
        for index, folder in enumerate(self.folders):
            for device_id in folder.device_ids:
                if self.exclude_devices.contains(device_id):
                    continue
                pairs.append((index, device_id))
                tasks.append(self.completion_task(folder, device_id))

        results: list[Any] = [None] * len(tasks)
        if not self.fetch_round(tasks, results):
            return False

        num_folders = len(self.folders)
        self.folder_errors = results[:num_folders]
        self.completions = [[] for _ in self.folders]
        for (index, device_id), completion in zip(pairs, results[num_folders:]):
            self.completions[index].append((device_id, completion))
        return True

    def completion_task(self, folder: Folder, device_id: str) -> FetchTask:
        return lambda: self.client.completion(folder.id, device_id)

    def evaluate(self) -> None:
        self.status.set_default_ok_message(
            str(len(self.folders)) + FOLDERS_OK_MESSAGE
        )
        if not self.check_folder_errors(self.folders, self.folder_errors):
            self.check_out_of_sync()
            self.check_not_shared()
        self.output_excluded()

    def check_out_of_sync(self) -> None:
        """Report folders with devices below 100% completion."""
        out_of_sync = []
        for folder, completions in zip(self.folders, self.completions):
            behind = [
                (device_id, c.completion)
                for device_id, c in completions
                if c.completion < 100
            ]
            if behind:
                out_of_sync.append((folder, behind))

        if not out_of_sync:
            return

        self.status.escalate(
            Severity.WARNING,
            f"{len(out_of_sync)}/{len(self.folders)} folders out of sync",
        )
        for folder, behind in out_of_sync:
            self.status.escalate(Severity.WARNING, "folder: " + folder_name(folder))
            self.status.escalate(
                Severity.WARNING,
                ", ".join(
                    f"device: {self.device_name(device_id)} - {format_number(pct)}%"
                    for device_id, pct in behind
                ),
            )

    def check_not_shared(self) -> None:
        """Report folders not shared with any device."""
        not_shared = [folder for folder in self.folders if not folder.device_ids]
        if not not_shared:
            return

        self.status.escalate(
            Severity.WARNING,
            f"{len(not_shared)} folder not shared: "
            + ", ".join(folder_name(folder) for folder in not_shared),
        )
