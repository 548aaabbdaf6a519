"""Notification sinks for triggered alerts."""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional
import logging
from telegram import Bot
from pricealert.core.config import settings
from pricealert.utils.time import is_in_quiet_hours


logger = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    SUPPRESSED = "suppressed"


class NotificationSink(ABC):
    """Delivers a title/message pair to the user."""

    @abstractmethod
    async def notify(self, title: str, message: str, topic: str) -> DeliveryStatus:
        """
        Deliver a notification.

        Returns SUPPRESSED (not an error) when delivery is not permitted.
        """
        pass

    async def close(self):
        pass


class LoggingNotificationSink(NotificationSink):
    """Sink that only logs notifications; used when no channel is configured."""

    async def notify(self, title: str, message: str, topic: str) -> DeliveryStatus:
        logger.info(f"[{topic}] {title} - {message}")
        return DeliveryStatus.DELIVERED


class TelegramNotificationSink(NotificationSink):
    """
    Sends alert notifications to a Telegram chat.

    Delivery is gated on notifications being enabled, a chat id being
    configured and the current time falling outside quiet hours.
    """

    def __init__(
        self,
        bot_token: Optional[str] = None,
        chat_id: Optional[str] = None,
        enabled: Optional[bool] = None,
        quiet_hours: Optional[dict] = None,
        timezone: Optional[str] = None
    ):
        self.bot = Bot(token=bot_token or settings.telegram_bot_token)
        self.chat_id = chat_id or settings.telegram_chat_id
        self.enabled = settings.notifications_enabled if enabled is None else enabled
        self.quiet_hours = quiet_hours if quiet_hours is not None else settings.quiet_hours
        self.timezone = timezone or settings.timezone

    def permission_granted(self) -> bool:
        return bool(self.enabled and self.chat_id)

    async def notify(self, title: str, message: str, topic: str) -> DeliveryStatus:
        if not self.permission_granted():
            logger.warning(f"Notification permission not granted, suppressing alert for {topic}")
            return DeliveryStatus.SUPPRESSED

        if is_in_quiet_hours(self.quiet_hours, self.timezone):
            logger.info(f"In quiet hours, suppressing alert for {topic}")
            return DeliveryStatus.SUPPRESSED

        await self.bot.send_message(
            chat_id=self.chat_id,
            text=f"{title}\n\n{message}"
        )

        logger.info(f"Sent alert notification for {topic} to chat {self.chat_id}")
        return DeliveryStatus.DELIVERED


def build_notification_sink() -> NotificationSink:
    """Pick the Telegram sink when a bot token is configured, else log only."""
    if settings.telegram_bot_token:
        return TelegramNotificationSink()
    logger.warning("TELEGRAM_BOT_TOKEN not set; notifications will be logged only")
    return LoggingNotificationSink()
