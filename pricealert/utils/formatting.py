"""Notification and listing formatting utilities."""
from datetime import datetime, timezone
from typing import Iterable

CURRENCY_PREFIX = "R$"

DIRECTION_ICONS = {
    "ABOVE": "🚀",
    "BELOW": "📉",
}


def _direction_value(direction) -> str:
    return getattr(direction, "value", direction)


def format_price(value: float) -> str:
    """Format a price with the currency prefix and 2 decimal places."""
    return f"{CURRENCY_PREFIX} {value:.2f}"


def format_alert_title(symbol: str, direction) -> str:
    """
    Build the notification title for a triggered alert.

    Args:
        symbol: Alert symbol
        direction: AlertDirection or its string value

    Returns:
        Title tagged with a direction-specific icon
    """
    direction = _direction_value(direction)
    icon = DIRECTION_ICONS.get(direction, "🔔")
    label = "above" if direction == "ABOVE" else "below"
    return f"{icon} Price Alert ({label}) - {symbol}"


def format_alert_message(symbol: str, direction, price: float, target_price: float) -> str:
    """Build the notification body with current and target prices."""
    direction = _direction_value(direction)
    verb = "reached" if direction == "ABOVE" else "dropped to"
    return f"{symbol} {verb} {format_price(price)} (target: {format_price(target_price)})"


def format_timestamp_ms(epoch_ms: int) -> str:
    """Render an epoch-millis timestamp as UTC text."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def format_history(records: Iterable) -> str:
    """
    Format trigger history for display.

    Args:
        records: AlertHistoryRecord objects, newest first

    Returns:
        Formatted history string
    """
    records = list(records)
    if not records:
        return "No alerts triggered yet."

    lines = ["📜 Recent Alerts:\n"]

    for rec in records[:10]:  # Show last 10
        direction = _direction_value(rec.direction)
        icon = DIRECTION_ICONS.get(direction, "🔔")
        lines.append(
            f"{icon} {rec.symbol} | {format_price(rec.actual_price)} "
            f"(target {format_price(rec.target_price)}) | {format_timestamp_ms(rec.triggered_at)}"
        )

    return "\n".join(lines)
