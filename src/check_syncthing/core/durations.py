"""
Duration and time parsing and formatting.

Durations use the same notation as the Syncthing ecosystem tooling
("5m", "1h30m", "90s") and are carried around as float seconds.
"""

import re
from datetime import datetime
from typing import Union

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Accepts plain numbers (seconds) or unit-suffixed strings such as
    "15m", "1h30m" or "2.5s".

    Args:
        value: Duration string or number of seconds

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value cannot be parsed or is negative
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("empty duration")
        try:
            seconds = float(text)
        except ValueError:
            seconds = _parse_units(text)

    if seconds < 0:
        raise ValueError(f"negative duration: {value!r}")
    return seconds


def _parse_units(text: str) -> float:
    """Parse a sequence of number+unit parts."""
    pos = 0
    total = 0.0
    for match in _PART_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {text!r}")
    return total


def format_number(value: float) -> str:
    """Format a number without a trailing ".0" for integral values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_duration(seconds: float) -> str:
    """
    Format seconds the way Go prints a time.Duration.

    Examples: 0 -> "0s", 300 -> "5m0s", 3723 -> "1h2m3s", 0.25 -> "250ms".
    """
    if seconds == 0:
        return "0s"

    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)

    if seconds < 1:
        return f"{sign}{format_number(round(seconds * 1000, 6))}ms"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    secs = round(secs, 9)

    text = ""
    if hours:
        text += f"{int(hours)}h"
    if hours or minutes:
        text += f"{int(minutes)}m"
    text += f"{format_number(secs)}s"
    return sign + text


def format_time(value: datetime) -> str:
    """
    Format a timestamp the way Go prints a time.Time.

    Example: "2024-01-02 03:04:06.5 +0000 UTC". Fractional seconds are shown
    without trailing zeros and omitted when zero. Zones other than UTC are
    named by their offset.
    """
    text = value.strftime("%Y-%m-%d %H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")

    offset = value.strftime("%z") or "+0000"
    zone = "UTC" if offset == "+0000" else offset
    return f"{text} {offset} {zone}"
