"""Unit tests for InMemoryAlertStore."""
import asyncio
import pytest

from pricealert.core.exceptions import AlertNotFound
from pricealert.providers.models import Quote
from pricealert.services.alert_store import AlertDirection, AlertHistoryRecord
from tests.conftest import create_alert, TEST_USER


def history_record(alert_id: str, triggered_at: int) -> AlertHistoryRecord:
    return AlertHistoryRecord(
        alert_id=alert_id,
        symbol="PETR4",
        target_price=35.0,
        actual_price=35.5,
        direction=AlertDirection.ABOVE,
        triggered_at=triggered_at,
        user_id=TEST_USER
    )


@pytest.mark.unit
@pytest.mark.asyncio
class TestAlerts:
    """Test alert CRUD."""

    async def test_save_assigns_id(self, store):
        """✅ save() returns a new id and stores a copy."""
        alert = create_alert()

        alert_id = await store.save(alert)

        assert alert_id
        assert alert.id == ""
        stored = await store.get(alert_id)
        assert stored.id == alert_id
        assert stored.symbol == "PETR4"

    async def test_get_returns_copy(self, store):
        """✅ Mutating a returned alert does not touch the store."""
        alert_id = await store.save(create_alert())
        fetched = await store.get(alert_id)
        fetched.active = False

        assert (await store.get(alert_id)).active is True

    async def test_active_snapshot(self, store):
        """✅ Snapshot lists only active alerts."""
        await store.save(create_alert(symbol="PETR4"))
        await store.save(create_alert(symbol="VALE3", active=False))

        active = await store.list_active_snapshot()

        assert [a.symbol for a in active] == ["PETR4"]

    async def test_user_alerts_newest_first(self, store):
        """✅ User listing includes inactive alerts, newest first."""
        await store.save(create_alert(symbol="PETR4", created_at=1))
        await store.save(create_alert(symbol="VALE3", created_at=2, active=False))

        alerts = await store.list_user_alerts()

        assert [a.symbol for a in alerts] == ["VALE3", "PETR4"]

    async def test_update(self, store):
        """✅ update() changes target and direction."""
        alert_id = await store.save(create_alert())

        updated = await store.update(alert_id, target_price=40.0, direction=AlertDirection.BELOW)

        assert updated.target_price == 40.0
        assert updated.direction == AlertDirection.BELOW

    async def test_update_missing(self, store):
        """❌ Unknown id → AlertNotFound."""
        with pytest.raises(AlertNotFound):
            await store.update("missing", target_price=1.0)

    async def test_deactivate_idempotent(self, store):
        """✅ Deactivating twice leaves one inactive alert, no error."""
        alert_id = await store.save(create_alert())

        await store.deactivate(alert_id)
        await store.deactivate(alert_id)
        await store.deactivate("missing")

        assert (await store.get(alert_id)).active is False
        assert await store.list_active_snapshot() == []

    async def test_delete(self, store):
        """✅ delete() removes the alert."""
        alert_id = await store.save(create_alert())
        await store.delete(alert_id)
        assert await store.get(alert_id) is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestQuotesAndHistory:
    """Test last-known quotes and history."""

    async def test_quote_roundtrip(self, store):
        """✅ put_quote then get_last_quote by any case."""
        quote = Quote.from_prices("PETR4", 35.5, observed_at=1)
        await store.put_quote(quote)

        assert await store.get_last_quote("petr4") == quote
        assert await store.get_last_quote("VALE3") is None

    async def test_history_newest_first(self, store):
        """✅ History listed newest first with limit."""
        for i in range(3):
            await store.append_history(history_record(f"a{i}", triggered_at=i))

        history = await store.list_history(limit=2)

        assert [r.alert_id for r in history] == ["a2", "a1"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestSubscribeActive:
    """Test the change feed."""

    async def test_initial_and_change(self, store):
        """✅ Emits current list, then the list after a change."""
        await store.save(create_alert(symbol="PETR4"))
        feed = store.subscribe_active()

        first = await asyncio.wait_for(feed.__anext__(), timeout=1)
        assert [a.symbol for a in first] == ["PETR4"]

        await store.save(create_alert(symbol="VALE3"))
        second = await asyncio.wait_for(feed.__anext__(), timeout=1)
        assert sorted(a.symbol for a in second) == ["PETR4", "VALE3"]

        await feed.aclose()

    async def test_coalesces_bursts(self, store):
        """✅ Several changes before the next read → one emission of the latest list."""
        feed = store.subscribe_active()
        await asyncio.wait_for(feed.__anext__(), timeout=1)

        first_id = await store.save(create_alert(symbol="PETR4"))
        await store.save(create_alert(symbol="VALE3"))
        await store.deactivate(first_id)

        latest = await asyncio.wait_for(feed.__anext__(), timeout=1)
        assert [a.symbol for a in latest] == ["VALE3"]

        await feed.aclose()
