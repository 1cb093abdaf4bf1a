"""Shared fixtures for check_syncthing tests."""

import os
import threading

import pytest

from check_syncthing.client.base import SyncthingAPI, SyncthingAPIError
from check_syncthing.core.models import (
    Device,
    DeviceStatistics,
    FileError,
    Folder,
    FolderCompletion,
    LogLine,
    SystemStatus,
)

MY_ID = "XXXXXX1-AAAAAAA-BBBBBBB-CCCCCCC-DDDDDDD-EEEEEEE-FFFFFFF-GGGGGGG"
REMOTE_ID = "YYYYYY2-AAAAAAA-BBBBBBB-CCCCCCC-DDDDDDD-EEEEEEE-FFFFFFF-GGGGGGG"
OTHER_ID = "ZZZZZZ3-AAAAAAA-BBBBBBB-CCCCCCC-DDDDDDD-EEEEEEE-FFFFFFF-GGGGGGG"

ENV_VARS = (
    "SYNCTHING_URL",
    "SYNCTHING_API_KEY",
    "CHECK_SYNCTHING_CONFIG",
    "CHECK_SYNCTHING_TIMEOUT",
    "CHECK_SYNCTHING_LOG_LEVEL",
)


class FakeSyncthingAPI(SyncthingAPI):
    """
    In-memory Syncthing API recording every call.

    Set an entry in `errors` to make the named method raise it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.calls: list[tuple] = []
        self.errors: dict[str, Exception] = {}

        self.health_status = "OK"
        self.error_log: list[LogLine] = []
        self.status = SystemStatus(my_id=MY_ID)
        self.device_list = [
            Device(device_id=MY_ID, name="some device"),
            Device(device_id=REMOTE_ID, name="laptop"),
        ]
        self.folder_list: list[Folder] = []
        self.file_errors: dict[str, list[FileError]] = {}
        self.completions: dict[tuple[str, str], float] = {}
        self.stats: dict[str, DeviceStatistics] = {}

    def _call(self, name: str, *args) -> None:
        with self._lock:
            self.calls.append((name, *args))
        if name in self.errors:
            raise self.errors[name]

    def call_names(self) -> list[str]:
        with self._lock:
            return [call[0] for call in self.calls]

    def health(self) -> str:
        self._call("health")
        return self.health_status

    def system_errors(self) -> list[LogLine]:
        self._call("system_errors")
        return list(self.error_log)

    def system_status(self) -> SystemStatus:
        self._call("system_status")
        return self.status

    def devices(self) -> list[Device]:
        self._call("devices")
        return list(self.device_list)

    def folders(self) -> list[Folder]:
        self._call("folders")
        return list(self.folder_list)

    def folder_errors(self, folder: str) -> list[FileError]:
        self._call("folder_errors", folder)
        return list(self.file_errors.get(folder, []))

    def completion(self, folder: str, device: str) -> FolderCompletion:
        self._call("completion", folder, device)
        return FolderCompletion(completion=self.completions.get((folder, device), 100.0))

    def device_stats(self) -> dict[str, DeviceStatistics]:
        self._call("device_stats")
        return dict(self.stats)


@pytest.fixture
def api():
    """Create a fake Syncthing API with a local and one remote device."""
    return FakeSyncthingAPI()


@pytest.fixture
def api_error():
    """Create a transport error as raised by the REST client."""
    return SyncthingAPIError("devices request: connection refused")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's Syncthing environment out of the tests."""
    monkeypatch.setattr(
        "check_syncthing.core.config.DEFAULT_CONFIG_FILE", tmp_path / "user.yaml"
    )
    monkeypatch.setattr(
        "check_syncthing.core.config.SYSTEM_CONFIG_FILE", tmp_path / "system.yaml"
    )
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes os.environ directly
    for name in ENV_VARS:
        os.environ.pop(name, None)
