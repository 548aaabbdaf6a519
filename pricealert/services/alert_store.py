"""Alert store contract, domain records and the in-memory implementation."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import AsyncIterator, Dict, List, Optional
import asyncio
import logging
import uuid
from pricealert.core.exceptions import AlertNotFound
from pricealert.providers.models import Quote, now_ms


logger = logging.getLogger(__name__)


class AlertDirection(str, Enum):
    """Which side of the target price fires the alert."""
    ABOVE = "ABOVE"
    BELOW = "BELOW"


@dataclass
class Alert:
    """User-defined price threshold and direction for a symbol."""
    symbol: str
    target_price: float
    direction: AlertDirection
    user_id: str
    current_price: float = 0.0
    active: bool = True
    created_at: int = field(default_factory=now_ms)  # epoch millis
    id: str = ""  # empty until persisted

    def __post_init__(self):
        self.symbol = self.symbol.strip().upper()
        self.direction = AlertDirection(self.direction)


@dataclass(frozen=True)
class AlertHistoryRecord:
    """Append-only record of one trigger."""
    alert_id: str
    symbol: str
    target_price: float
    actual_price: float
    direction: AlertDirection
    triggered_at: int  # epoch millis
    user_id: str


class AlertStore(ABC):
    """
    Persistence boundary for alerts, last-known quotes and trigger history.

    Implementations must make deactivate() atomic and idempotent: it is the
    only guard against re-triggering an alert already observed inactive.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id

    @abstractmethod
    async def save(self, alert: Alert) -> str:
        """Persist an alert and return its id. Raises StoreError."""
        pass

    @abstractmethod
    async def get(self, alert_id: str) -> Optional[Alert]:
        pass

    @abstractmethod
    def subscribe_active(self) -> AsyncIterator[List[Alert]]:
        """
        Live feed of the active alert list.

        Yields the current list immediately, then again after every change.
        Never completes on its own.
        """
        pass

    @abstractmethod
    async def list_active_snapshot(self) -> List[Alert]:
        """Point-in-time list of active alerts."""
        pass

    @abstractmethod
    async def list_user_alerts(self) -> List[Alert]:
        """All alerts (active or not) owned by the configured user."""
        pass

    @abstractmethod
    async def update(
        self,
        alert_id: str,
        target_price: Optional[float] = None,
        direction: Optional[AlertDirection] = None
    ) -> Alert:
        """Edit target/direction. Raises AlertNotFound for unknown ids."""
        pass

    @abstractmethod
    async def deactivate(self, alert_id: str) -> None:
        """Mark an alert inactive. No-op if already inactive or unknown."""
        pass

    @abstractmethod
    async def delete(self, alert_id: str) -> None:
        pass

    @abstractmethod
    async def get_last_quote(self, symbol: str) -> Optional[Quote]:
        pass

    @abstractmethod
    async def put_quote(self, quote: Quote) -> None:
        pass

    @abstractmethod
    async def append_history(self, record: AlertHistoryRecord) -> None:
        pass

    @abstractmethod
    async def list_history(self, limit: int = 50) -> List[AlertHistoryRecord]:
        """Most recent trigger records first."""
        pass

    async def close(self):
        """Release any resources held by the store."""
        pass


class InMemoryAlertStore(AlertStore):
    """Dict-backed store with an in-process change feed."""

    def __init__(self, user_id: str):
        super().__init__(user_id)
        self._alerts: Dict[str, Alert] = {}
        self._quotes: Dict[str, Quote] = {}
        self._history: List[AlertHistoryRecord] = []
        self._version = 0
        self._changed = asyncio.Condition()

    async def _bump(self):
        async with self._changed:
            self._version += 1
            self._changed.notify_all()

    def _active(self) -> List[Alert]:
        return [replace(a) for a in self._alerts.values() if a.active]

    async def save(self, alert: Alert) -> str:
        alert_id = alert.id or str(uuid.uuid4())
        self._alerts[alert_id] = replace(alert, id=alert_id)
        await self._bump()
        return alert_id

    async def get(self, alert_id: str) -> Optional[Alert]:
        alert = self._alerts.get(alert_id)
        return replace(alert) if alert else None

    async def subscribe_active(self) -> AsyncIterator[List[Alert]]:
        seen = -1
        while True:
            async with self._changed:
                await self._changed.wait_for(lambda: self._version != seen)
                seen = self._version
                snapshot = self._active()
            yield snapshot

    async def list_active_snapshot(self) -> List[Alert]:
        return self._active()

    async def list_user_alerts(self) -> List[Alert]:
        alerts = [replace(a) for a in self._alerts.values() if a.user_id == self.user_id]
        return sorted(alerts, key=lambda a: a.created_at, reverse=True)

    async def update(
        self,
        alert_id: str,
        target_price: Optional[float] = None,
        direction: Optional[AlertDirection] = None
    ) -> Alert:
        alert = self._alerts.get(alert_id)
        if alert is None:
            raise AlertNotFound(alert_id)

        changes = {}
        if target_price is not None:
            changes["target_price"] = target_price
        if direction is not None:
            changes["direction"] = AlertDirection(direction)

        updated = replace(alert, **changes)
        self._alerts[alert_id] = updated
        await self._bump()
        return replace(updated)

    async def deactivate(self, alert_id: str) -> None:
        alert = self._alerts.get(alert_id)
        if alert is None or not alert.active:
            return
        self._alerts[alert_id] = replace(alert, active=False)
        await self._bump()

    async def delete(self, alert_id: str) -> None:
        if self._alerts.pop(alert_id, None) is not None:
            await self._bump()

    async def get_last_quote(self, symbol: str) -> Optional[Quote]:
        return self._quotes.get(symbol.strip().upper())

    async def put_quote(self, quote: Quote) -> None:
        self._quotes[quote.symbol] = quote

    async def append_history(self, record: AlertHistoryRecord) -> None:
        self._history.append(record)

    async def list_history(self, limit: int = 50) -> List[AlertHistoryRecord]:
        return list(reversed(self._history))[:limit]
