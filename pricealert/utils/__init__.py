"""Utilities package initialization."""
from pricealert.utils.time import is_in_quiet_hours
from pricealert.utils.formatting import (
    format_price,
    format_alert_title,
    format_alert_message,
    format_history
)

__all__ = [
    "is_in_quiet_hours",
    "format_price",
    "format_alert_title",
    "format_alert_message",
    "format_history"
]
