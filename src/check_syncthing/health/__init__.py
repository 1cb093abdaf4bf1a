"""
Check engine for check_syncthing.

Provides status accumulation, device exclusion, bounded fetching, and the
health, folders, and last seen checks.
"""

from check_syncthing.health.checks import (
    CheckFlow,
    CheckState,
    HealthCheck,
)
from check_syncthing.health.exclusion import (
    DeviceExclusionFilter,
    device_name,
    short_device_id,
)
from check_syncthing.health.fetch import FetchRound, run_bounded
from check_syncthing.health.folders import FolderStatusCheck
from check_syncthing.health.last_seen import FreshnessCheck
from check_syncthing.health.status import (
    DuplicateMetricError,
    PerfDataPoint,
    Range,
    Severity,
    StatusAccumulator,
)

__all__ = [
    # Status
    "Severity",
    "StatusAccumulator",
    "PerfDataPoint",
    "Range",
    "DuplicateMetricError",
    # Devices
    "DeviceExclusionFilter",
    "device_name",
    "short_device_id",
    # Fetching
    "FetchRound",
    "run_bounded",
    # Checks
    "CheckFlow",
    "CheckState",
    "HealthCheck",
    "FolderStatusCheck",
    "FreshnessCheck",
]
