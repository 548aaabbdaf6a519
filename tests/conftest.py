"""Shared pytest fixtures for price alert tests."""
import asyncio
import pytest
from typing import Dict, List, Optional
from pricealert.providers import QuoteSource, ProviderError
from pricealert.providers.models import Quote
from pricealert.services.alert_store import Alert, AlertDirection, InMemoryAlertStore
from pricealert.services.quote_cache import QuoteCache
from pricealert.services.quote_provider import QuoteProvider
from pricealert.workers.notification_sink import DeliveryStatus, NotificationSink


TEST_USER = "test_user_001"
BASE_TIME_MS = 1_700_000_000_000


class FakeClock:
    """Manually advanced epoch-millis clock."""

    def __init__(self, start: int = BASE_TIME_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


class FakeQuoteSource(QuoteSource):
    """Quote source serving a mutable price table and counting calls."""

    def __init__(self, prices: Optional[Dict[str, float]] = None, name: str = "fake", clock=None):
        self.prices = dict(prices or {})
        self.name = name
        self.clock = clock
        self.calls: List[str] = []
        self.closed = False

    async def get_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        price = self.prices.get(symbol)
        if price is None:
            raise ProviderError(f"{self.name} has no price for {symbol}")
        observed_at = self.clock() if self.clock else None
        return Quote.from_prices(symbol, price, observed_at=observed_at)

    async def close(self):
        self.closed = True


class RecordingSink(NotificationSink):
    """Sink that records every notification."""

    def __init__(self, status: DeliveryStatus = DeliveryStatus.DELIVERED):
        self.status = status
        self.sent: List[tuple] = []

    async def notify(self, title: str, message: str, topic: str) -> DeliveryStatus:
        self.sent.append((title, message, topic))
        return self.status


async def shutdown_monitor(monitor):
    """Stop a monitor and wait until its background tasks have finished."""
    await monitor.stop()
    tasks = [t for t in (monitor._task, monitor._feed_task) if t is not None]
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)


def create_alert(
    symbol: str = "PETR4",
    target_price: float = 35.00,
    direction: AlertDirection = AlertDirection.ABOVE,
    active: bool = True,
    alert_id: str = "",
    created_at: int = BASE_TIME_MS
) -> Alert:
    """Factory function to create Alert instances for testing."""
    return Alert(
        symbol=symbol,
        target_price=target_price,
        direction=direction,
        user_id=TEST_USER,
        current_price=34.00,
        active=active,
        created_at=created_at,
        id=alert_id
    )


@pytest.fixture
def clock():
    """Controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def store():
    """Empty in-memory alert store for the test user."""
    return InMemoryAlertStore(TEST_USER)


@pytest.fixture
def sink():
    """Recording notification sink."""
    return RecordingSink()


@pytest.fixture
def primary(clock):
    """Primary fake source with PETR4 and VALE3 prices."""
    return FakeQuoteSource({"PETR4": 35.50, "VALE3": 68.20}, name="primary", clock=clock)


@pytest.fixture
def fallback(clock):
    """Fallback fake source with a single ITUB4 price."""
    return FakeQuoteSource({"ITUB4": 32.15}, name="fallback", clock=clock)


@pytest.fixture
def provider(primary, fallback, clock):
    """QuoteProvider over the fake sources with a clock-driven cache."""
    return QuoteProvider(
        primary=primary,
        fallback=fallback,
        cache=QuoteCache(ttl_ms=30_000, clock=clock),
        max_concurrency=4,
        popular_symbols=["PETR4", "VALE3", "ITUB4", "XXXX3"]
    )
