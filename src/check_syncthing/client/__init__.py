"""
Syncthing REST API client module.

Provides the API interface consumed by the checks and its HTTP implementation.
"""

from check_syncthing.client.base import SyncthingAPI, SyncthingAPIError
from check_syncthing.client.rest import SyncthingClient

__all__ = [
    "SyncthingAPI",
    "SyncthingAPIError",
    "SyncthingClient",
]
