"""Workers package initialization."""
from pricealert.workers.monitor_loop import MonitorLoop, MonitorState, CycleReport
from pricealert.workers.notification_sink import (
    NotificationSink,
    LoggingNotificationSink,
    TelegramNotificationSink,
    DeliveryStatus
)

__all__ = [
    "MonitorLoop",
    "MonitorState",
    "CycleReport",
    "NotificationSink",
    "LoggingNotificationSink",
    "TelegramNotificationSink",
    "DeliveryStatus"
]
