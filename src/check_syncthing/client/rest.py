"""
Syncthing REST API client.

Talks to the daemon over HTTP using requests.
"""

import logging
from typing import Any, Optional

import requests

from check_syncthing.client.base import SyncthingAPI, SyncthingAPIError
from check_syncthing.core.config import DEFAULT_TIMEOUT
from check_syncthing.core.models import (
    Device,
    DeviceStatistics,
    FileError,
    Folder,
    FolderCompletion,
    LogLine,
    SystemStatus,
)

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-API-Key"


class SyncthingClient(SyncthingAPI):
    """
    Client for the Syncthing REST API.

    Endpoints used:
    - Health:        GET /rest/noauth/health
    - System errors: GET /rest/system/error
    - System status: GET /rest/system/status
    - Devices:       GET /rest/config/devices
    - Folders:       GET /rest/config/folders
    - Folder errors: GET /rest/folder/errors?folder=<id>
    - Completion:    GET /rest/db/completion?folder=<id>&device=<id>
    - Device stats:  GET /rest/stats/device
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Syncthing client.

        Args:
            base_url: Base URL of the Syncthing GUI, e.g. http://127.0.0.1:8384
            api_key: REST API key
            timeout: Request timeout in seconds
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.api_key = api_key

    @property
    def api_key(self) -> str:
        return self._api_key

    @api_key.setter
    def api_key(self, value: str) -> None:
        self._api_key = value
        self.session.headers[AUTH_HEADER] = value

    def _get(self, op: str, endpoint: str, params: Optional[dict] = None) -> Any:
        """
        Send GET request and decode the JSON response.

        Args:
            op: Operation name used as error message prefix
            endpoint: API path, e.g. "/rest/config/devices"
            params: Optional query parameters

        Returns:
            Decoded JSON body

        Raises:
            SyncthingAPIError: On transport failure or unexpected response
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"GET {url} params={params}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise SyncthingAPIError(f"{op} request: {e}") from e

        is_json = response.headers.get("Content-Type", "").startswith(
            "application/json"
        )

        if response.status_code != 200 or not is_json:
            raise SyncthingAPIError(f"{op}: {_describe_failure(response, is_json)}")

        try:
            return response.json()
        except ValueError as e:
            raise SyncthingAPIError(f"{op}: invalid response: {e}") from e

    def health(self) -> str:
        data = self._get("health", "/rest/noauth/health")
        return str(_require_dict("health", data).get("status", ""))

    def system_errors(self) -> list[LogLine]:
        data = self._get("system errors", "/rest/system/error")
        data = _require_dict("system errors", data)
        return [LogLine.from_dict(item) for item in data.get("errors") or []]

    def system_status(self) -> SystemStatus:
        data = self._get("system status", "/rest/system/status")
        return SystemStatus.from_dict(_require_dict("system status", data))

    def devices(self) -> list[Device]:
        data = self._get("devices", "/rest/config/devices")
        return [Device.from_dict(item) for item in _require_list("devices", data)]

    def folders(self) -> list[Folder]:
        data = self._get("folders", "/rest/config/folders")
        return [Folder.from_dict(item) for item in _require_list("folders", data)]

    def folder_errors(self, folder: str) -> list[FileError]:
        data = self._get("folder errors", "/rest/folder/errors", {"folder": folder})
        data = _require_dict("folder errors", data)
        return [FileError.from_dict(item) for item in data.get("errors") or []]

    def completion(self, folder: str, device: str) -> FolderCompletion:
        data = self._get(
            "completion",
            "/rest/db/completion",
            {"folder": folder, "device": device},
        )
        return FolderCompletion.from_dict(_require_dict("completion", data))

    def device_stats(self) -> dict[str, DeviceStatistics]:
        data = self._get("device stats", "/rest/stats/device")
        data = _require_dict("device stats", data)
        return {
            device_id: DeviceStatistics.from_dict(stats or {})
            for device_id, stats in data.items()
        }


def _describe_failure(response: requests.Response, is_json: bool) -> str:
    """Build error text for a non-successful response."""
    if is_json:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return f"unexpected syncthing error: {body['error']}"

    status = f"{response.status_code} {response.reason or ''}".strip()
    return f"unexpected syncthing response: {status} ({response.text})"


def _require_dict(op: str, data: Any) -> dict:
    if not isinstance(data, dict):
        raise SyncthingAPIError(f"{op}: invalid response: expected object")
    return data


def _require_list(op: str, data: Any) -> list:
    if not isinstance(data, list):
        raise SyncthingAPIError(f"{op}: invalid response: expected array")
    return data
