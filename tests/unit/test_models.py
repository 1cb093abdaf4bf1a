"""Unit tests for API data models."""

from datetime import datetime, timedelta, timezone

from check_syncthing.core.models import (
    EPOCH,
    Device,
    DeviceStatistics,
    Folder,
    FolderCompletion,
    SystemStatus,
    parse_timestamp,
)


class TestParseTimestamp:
    """Tests for RFC 3339 timestamp parsing."""

    def test_utc_suffix(self):
        assert parse_timestamp("2024-06-01T12:00:00Z") == datetime(
            2024, 6, 1, 12, tzinfo=timezone.utc
        )

    def test_nanoseconds_truncated(self):
        parsed = parse_timestamp("2024-06-01T12:00:00.987654321Z")
        assert parsed.microsecond == 987654

    def test_short_fraction_padded(self):
        """Test fractions with trailing zeros dropped are accepted."""
        parsed = parse_timestamp("2024-01-01T10:00:00.1234Z")
        assert parsed.microsecond == 123400

    def test_single_digit_fraction(self):
        assert parse_timestamp("2024-01-01T10:00:31.5Z").microsecond == 500000

    def test_offset(self):
        parsed = parse_timestamp("2024-06-01T14:00:00+02:00")
        assert parsed.utcoffset() == timedelta(hours=2)
        assert parsed == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)

    def test_empty(self):
        assert parse_timestamp("") == EPOCH
        assert parse_timestamp(None) == EPOCH


class TestModels:
    """Tests for from_dict constructors."""

    def test_device_defaults(self):
        device = Device.from_dict({})
        assert device.device_id == ""
        assert device.name == ""

    def test_folder_without_devices(self):
        """Test a null device list decodes as not shared."""
        folder = Folder.from_dict({"id": "f1", "devices": None})
        assert folder.device_ids == []

    def test_completion(self):
        assert FolderCompletion.from_dict({"completion": 100}).completion == 100.0

    def test_system_status_casing(self):
        """Test both spellings of the device ID field are accepted."""
        assert SystemStatus.from_dict({"myID": "A"}).my_id == "A"
        assert SystemStatus.from_dict({"MyID": "B"}).my_id == "B"


class TestDeviceStatistics:
    """Tests for DeviceStatistics."""

    def test_never_seen_default(self):
        assert DeviceStatistics().never_seen is True

    def test_never_seen_missing_field(self):
        assert DeviceStatistics.from_dict({}).never_seen is True

    def test_seen(self):
        stats = DeviceStatistics.from_dict({"lastSeen": "2024-06-01T12:00:00Z"})
        assert stats.never_seen is False

    def test_before_epoch(self):
        """Test Go zero times count as never seen."""
        stats = DeviceStatistics.from_dict({"lastSeen": "0001-01-01T00:00:00Z"})
        assert stats.never_seen is True
