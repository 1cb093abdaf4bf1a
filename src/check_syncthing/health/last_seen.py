"""
Last seen check.

Finds the remote device with the oldest last seen time and compares its age
against warning and critical thresholds.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

from check_syncthing.client.base import SyncthingAPI
from check_syncthing.core.config import CheckSettings
from check_syncthing.core.durations import format_duration
from check_syncthing.core.models import DeviceStatistics, SystemStatus
from check_syncthing.health.checks import CheckFlow
from check_syncthing.health.status import (
    DuplicateMetricError,
    PerfDataPoint,
    Range,
    Severity,
)

LAST_SEEN_OK_MESSAGE = "oldest last seen: "
LAST_SEEN_METRIC = "last seen"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FreshnessCheck(CheckFlow):
    """
    Checks last seen time of syncthing devices.

    The daemon's own device and excluded devices are ignored. A device that
    was never seen is reported as WARNING without threshold evaluation.
    """

    default_ok_message = LAST_SEEN_OK_MESSAGE

    def __init__(
        self,
        client: SyncthingAPI,
        settings: Optional[CheckSettings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize check.

        Args:
            client: Syncthing API client
            settings: Check settings with last seen thresholds
            clock: Returns the current time, timezone-aware
        """
        super().__init__(client, settings)
        self.clock = clock
        self.system: Optional[SystemStatus] = None
        self.stats: dict[str, DeviceStatistics] = {}

    @property
    def warn_threshold(self) -> float:
        return self.settings.warn_last_seen

    @property
    def crit_threshold(self) -> float:
        return self.settings.crit_last_seen

    def fetch(self) -> bool:
        results: list[Any] = [None] * 3
        tasks = [
            self.client.system_status,
            self.client.devices,
            self.client.device_stats,
        ]
        if not self.fetch_round(tasks, results):
            return False

        self.system, devices, self.stats = results
        self.set_devices(devices)
        return True

    def oldest(self) -> tuple[Optional[str], Optional[DeviceStatistics]]:
        """
        Find the device with the oldest last seen time.

        A never seen device wins immediately. If several devices were never
        seen, whichever comes first in the snapshot is returned.

        Returns:
            (device ID, statistics), or (None, None) if no device qualifies
        """
        oldest_id: Optional[str] = None
        oldest: Optional[DeviceStatistics] = None

        for device_id, stats in self.stats.items():
            if self.exclude_devices.contains(device_id):
                continue
            if device_id == self.system.my_id:
                continue
            if oldest is None or stats.last_seen < oldest.last_seen:
                oldest_id, oldest = device_id, stats
                if stats.never_seen:
                    break

        return oldest_id, oldest

    def classify(self, elapsed: int) -> tuple[Severity, Optional[float]]:
        """
        Compare elapsed seconds against thresholds.

        Returns:
            (severity, threshold that was crossed or None)
        """
        if elapsed >= self.crit_threshold:
            return Severity.CRITICAL, self.crit_threshold
        if elapsed >= self.warn_threshold:
            return Severity.WARNING, self.warn_threshold
        return Severity.OK, None

    def evaluate(self) -> None:
        device_id, stats = self.oldest()
        if device_id is None:
            self.status.set_default_ok_message("no devices to check")
            self.output_excluded()
            return

        if self.status.escalate_if(
            stats.never_seen,
            Severity.WARNING,
            "never seen device " + self.device_name(device_id),
        ):
            return

        elapsed = int((self.clock() - stats.last_seen).total_seconds())
        self.status.set_default_ok_message(
            f"{LAST_SEEN_OK_MESSAGE}{format_duration(elapsed)} ago"
        )

        point = PerfDataPoint(
            label=LAST_SEEN_METRIC,
            value=elapsed,
            unit="s",
            warn=Range(0, self.warn_threshold),
            crit=Range(0, self.crit_threshold),
        )
        try:
            self.status.add_metric(point)
        except DuplicateMetricError as e:
            self.status.escalate(
                Severity.UNKNOWN, f"failed to add performance data point: {e}"
            )
            return

        severity, threshold = self.classify(elapsed)
        if severity != Severity.OK:
            self.status.escalate(
                severity,
                f"last seen is outside of {severity.name.lower()} threshold",
            )
        self.report_device(device_id, elapsed, threshold)

    def report_device(
        self, device_id: str, elapsed: int, threshold: Optional[float]
    ) -> None:
        severity = self.status.severity
        self.status.escalate(severity, "device: " + self.device_name(device_id))

        if threshold is not None:
            self.status.escalate(severity, f"last seen: {format_duration(elapsed)} ago")
            self.status.escalate(severity, f"threshold: {format_duration(threshold)}")
        self.output_excluded()
