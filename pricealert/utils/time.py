"""Time utilities for quiet hours and timezone handling."""
from datetime import datetime, time
from typing import Optional
import pytz


def is_in_quiet_hours(
    quiet_hours: dict,
    timezone_str: str = "America/Sao_Paulo",
    now: Optional[datetime] = None
) -> bool:
    """
    Check if the given (or current) time is within quiet hours.

    Args:
        quiet_hours: Dict with 'enabled', 'start', 'end' keys
        timezone_str: User's timezone
        now: Optional aware datetime to test instead of the current time

    Returns:
        True if in quiet hours, False otherwise
    """
    if not quiet_hours.get("enabled", False):
        return False

    try:
        tz = pytz.timezone(timezone_str)
        local_now = (now.astimezone(tz) if now is not None else datetime.now(tz)).time()

        start_time = time.fromisoformat(quiet_hours.get("start", "22:00"))
        end_time = time.fromisoformat(quiet_hours.get("end", "08:00"))

        # Handle overnight quiet hours (e.g., 22:00 to 08:00)
        if start_time > end_time:
            return local_now >= start_time or local_now <= end_time
        else:
            return start_time <= local_now <= end_time

    except (pytz.UnknownTimeZoneError, ValueError):
        return False
