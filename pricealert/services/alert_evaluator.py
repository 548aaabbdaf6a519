"""Alert trigger evaluation."""
from dataclasses import dataclass
from typing import Optional, Union
from pricealert.providers.models import Quote, now_ms
from pricealert.services.alert_store import Alert, AlertDirection, AlertHistoryRecord
from pricealert.utils.formatting import format_alert_title, format_alert_message


@dataclass(frozen=True)
class Trigger:
    """Decision to fire an alert, with its notification payload."""
    title: str
    message: str
    topic: str
    record: AlertHistoryRecord


@dataclass(frozen=True)
class NoTrigger:
    """Decision not to fire; reason is informational."""
    reason: str


Decision = Union[Trigger, NoTrigger]


def condition_met(direction: AlertDirection, price: float, target_price: float) -> bool:
    """Boundary-inclusive threshold check."""
    if direction == AlertDirection.ABOVE:
        return price >= target_price
    if direction == AlertDirection.BELOW:
        return price <= target_price
    return False


def evaluate(alert: Alert, quote: Quote, now: Optional[int] = None) -> Decision:
    """
    Decide whether an alert fires for a quote.

    Pure function: no I/O. An inactive alert never fires.

    Args:
        alert: Alert to check
        quote: Latest quote for the alert's symbol
        now: Trigger timestamp in epoch millis (defaults to current time)

    Returns:
        Trigger with title/message/history record, or NoTrigger
    """
    if not alert.active:
        return NoTrigger(reason="inactive")

    if not condition_met(alert.direction, quote.price, alert.target_price):
        return NoTrigger(reason="condition_not_met")

    record = AlertHistoryRecord(
        alert_id=alert.id,
        symbol=alert.symbol,
        target_price=alert.target_price,
        actual_price=quote.price,
        direction=alert.direction,
        triggered_at=now if now is not None else now_ms(),
        user_id=alert.user_id,
    )

    return Trigger(
        title=format_alert_title(alert.symbol, alert.direction),
        message=format_alert_message(alert.symbol, alert.direction, quote.price, alert.target_price),
        topic=alert.symbol,
        record=record,
    )
