"""Unit tests for Time Utils.

This module tests the quiet hours logic used to gate notifications.
"""
import pytest
from datetime import datetime
import pytz

from pricealert.utils.time import is_in_quiet_hours


def at(hour: int, minute: int = 0, tz: str = "UTC") -> datetime:
    return pytz.timezone(tz).localize(datetime(2025, 1, 1, hour, minute))


# ============================================================================
# Tests for is_in_quiet_hours
# ============================================================================

@pytest.mark.unit
class TestQuietHours:
    """Test is_in_quiet_hours function."""

    def test_disabled(self):
        """✅ Disabled quiet hours."""
        config = {"enabled": False}
        assert is_in_quiet_hours(config) is False

    def test_in_quiet_hours_overnight(self):
        """✅ Inside overnight quiet hours (e.g. 23:00)."""
        config = {"enabled": True, "start": "22:00", "end": "08:00"}
        assert is_in_quiet_hours(config, "UTC", now=at(23)) is True
        assert is_in_quiet_hours(config, "UTC", now=at(7, 59)) is True

    def test_outside_quiet_hours_overnight(self):
        """✅ Outside overnight quiet hours (e.g. 10:00)."""
        config = {"enabled": True, "start": "22:00", "end": "08:00"}
        assert is_in_quiet_hours(config, "UTC", now=at(10)) is False

    def test_in_quiet_hours_same_day(self):
        """✅ Inside same-day quiet hours (e.g. 14:00-16:00)."""
        config = {"enabled": True, "start": "14:00", "end": "16:00"}
        assert is_in_quiet_hours(config, "UTC", now=at(15)) is True
        assert is_in_quiet_hours(config, "UTC", now=at(17)) is False

    def test_converted_to_user_timezone(self):
        """✅ 01:00 UTC is 22:00 in Sao Paulo → quiet."""
        config = {"enabled": True, "start": "22:00", "end": "08:00"}
        assert is_in_quiet_hours(config, "America/Sao_Paulo", now=at(1)) is True
        assert is_in_quiet_hours(config, "America/Sao_Paulo", now=at(15)) is False

    def test_invalid_timezone(self):
        """✅ Invalid timezone handles gracefully."""
        config = {"enabled": True}
        assert is_in_quiet_hours(config, "Invalid/Zone") is False

    def test_invalid_time_format(self):
        """✅ Unparseable start time handled gracefully."""
        config = {"enabled": True, "start": "late", "end": "08:00"}
        assert is_in_quiet_hours(config, "UTC", now=at(23)) is False
