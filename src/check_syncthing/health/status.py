"""
Plugin status accumulation and output rendering.

Collects severity, report lines, and performance data during a check run
and renders them in the Nagios plugin output format.
"""

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from check_syncthing.core.durations import format_number


class Severity(IntEnum):
    """Plugin result severity, ordered by badness.

    The integer value is the process exit code expected by the monitoring host.
    """

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @property
    def exit_code(self) -> int:
        return int(self)

    def merge(self, other: "Severity") -> "Severity":
        """Return the worse of two severities."""
        return max(self, other)


class DuplicateMetricError(ValueError):
    """Performance data point with this name was already added."""


@dataclass(frozen=True)
class Range:
    """Threshold range for a performance data point."""

    start: float = 0.0
    end: Optional[float] = None

    def __str__(self) -> str:
        end = "" if self.end is None else format_number(self.end)
        if self.start == 0:
            return end
        return f"{format_number(self.start)}:{end}"


@dataclass(frozen=True)
class PerfDataPoint:
    """A single performance data point."""

    label: str
    value: float
    unit: str = ""
    warn: Optional[Range] = None
    crit: Optional[Range] = None
    min: Optional[float] = None
    max: Optional[float] = None

    def format(self) -> str:
        """Format as 'label'=value[unit];[warn];[crit];[min];[max]."""
        label = self.label
        if " " in label or "=" in label or "'" in label:
            label = "'" + label.replace("'", "''") + "'"

        fields = [
            f"{format_number(self.value)}{self.unit}",
            "" if self.warn is None else str(self.warn),
            "" if self.crit is None else str(self.crit),
            "" if self.min is None else format_number(self.min),
            "" if self.max is None else format_number(self.max),
        ]
        return f"{label}=" + ";".join(fields)


class StatusAccumulator:
    """
    Accumulates the outcome of a check run.

    Severity only ever rises. Messages are kept in the order they were
    escalated. Safe for concurrent use by fetch workers.
    """

    def __init__(self, default_ok_message: str = ""):
        """
        Initialize accumulator.

        Args:
            default_ok_message: Line reported when the run ends at OK
        """
        self._lock = threading.Lock()
        self._severity = Severity.OK
        self._messages: list[str] = []
        self._metrics: dict[str, PerfDataPoint] = {}
        self.default_ok_message = default_ok_message

    def set_default_ok_message(self, text: str) -> None:
        self.default_ok_message = text

    @property
    def severity(self) -> Severity:
        with self._lock:
            return self._severity

    @property
    def messages(self) -> list[str]:
        with self._lock:
            return list(self._messages)

    @property
    def metrics(self) -> list[PerfDataPoint]:
        with self._lock:
            return list(self._metrics.values())

    def escalate(self, severity: Severity, message: str = "") -> None:
        """
        Raise severity and record a message.

        Args:
            severity: Severity of the finding; merged with the current one
            message: Report line; empty messages are not recorded
        """
        with self._lock:
            self._severity = self._severity.merge(severity)
            if message:
                self._messages.append(message)

    def escalate_on_error(
        self, err: Optional[BaseException], severity: Severity
    ) -> bool:
        """
        Escalate with the error text if an error is present.

        Returns:
            True if err was not None
        """
        if err is None:
            return False
        self.escalate(severity, str(err))
        return True

    def escalate_if(self, cond: bool, severity: Severity, message: str) -> bool:
        """Escalate only if cond holds; returns cond."""
        if cond:
            self.escalate(severity, message)
        return cond

    def add_metric(self, point: PerfDataPoint) -> None:
        """
        Add a performance data point.

        Raises:
            DuplicateMetricError: If a point with the same label exists
        """
        with self._lock:
            if point.label in self._metrics:
                raise DuplicateMetricError(
                    f"performance data point {point.label!r} already exists"
                )
            self._metrics[point.label] = point

    def render(self) -> str:
        """
        Render plugin output.

        Returns:
            "<SEVERITY>: <line1>\\n<line2>...[ | perfdata...]"
        """
        with self._lock:
            severity = self._severity
            lines = list(self._messages)
            metrics = list(self._metrics.values())

        if severity == Severity.OK and self.default_ok_message:
            lines.insert(0, self.default_ok_message)
        elif not lines:
            lines.append(self.default_ok_message)

        output = f"{severity.name}: " + "\n".join(lines)
        if metrics:
            output += " | " + " ".join(point.format() for point in metrics)
        return output
