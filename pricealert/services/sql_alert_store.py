"""Alert store backed by SQLAlchemy (alerts, history) and Redis (quotes, change feed)."""
from typing import AsyncIterator, List, Optional, Tuple
import asyncio
import functools
import logging
import uuid
from redis.exceptions import RedisError
from sqlalchemy import select, update, delete, desc
from sqlalchemy.exc import SQLAlchemyError
from pricealert.core.config import settings
from pricealert.core.database import AsyncSessionLocal
from pricealert.core.exceptions import AlertNotFound, StoreError
from pricealert.core.redis import get_redis
from pricealert.models import PriceAlert, AlertHistory
from pricealert.providers.models import Quote
from pricealert.services.alert_store import (
    Alert,
    AlertDirection,
    AlertHistoryRecord,
    AlertStore,
)


logger = logging.getLogger(__name__)


def _to_alert(row: PriceAlert) -> Alert:
    return Alert(
        id=row.id,
        symbol=row.symbol,
        current_price=row.current_price,
        target_price=row.target_price,
        direction=AlertDirection(row.direction),
        active=row.active,
        created_at=row.created_at,
        user_id=row.user_id,
    )


def _to_record(row: AlertHistory) -> AlertHistoryRecord:
    return AlertHistoryRecord(
        alert_id=row.alert_id,
        symbol=row.symbol,
        target_price=row.target_price,
        actual_price=row.actual_price,
        direction=AlertDirection(row.direction),
        triggered_at=row.triggered_at,
        user_id=row.user_id,
    )


def _fingerprint(alerts: List[Alert]) -> List[Tuple]:
    return sorted((a.id, a.symbol, a.target_price, a.direction.value) for a in alerts)


def bounded(operation: str):
    """Run a store call under the store's timeout; expiry raises StoreError."""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await asyncio.wait_for(func(self, *args, **kwargs), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                logger.error(f"Store call timed out after {self.timeout}s: {operation}")
                raise StoreError(f"Timed out after {self.timeout}s: {operation}") from e
        return wrapper
    return decorator


class SqlAlertStore(AlertStore):
    """
    Persistent alert store.

    Alerts and trigger history live in the database. Last-known quotes are
    kept in Redis hashes (``quote:{SYMBOL}``), and every alert mutation is
    announced on a Redis channel so subscribe_active() can push updates to
    other processes.
    """

    CHANGES_CHANNEL = "price_alerts:changed"

    def __init__(
        self,
        user_id: str,
        session_factory=None,
        redis_client=None,
        resync_seconds: Optional[float] = None,
        timeout: Optional[float] = None
    ):
        super().__init__(user_id)
        self.session_factory = session_factory or AsyncSessionLocal
        self.redis = redis_client
        self.resync_seconds = resync_seconds or settings.alert_feed_resync_seconds
        self.timeout = timeout or settings.db_timeout_seconds

    async def _get_redis(self):
        """Get Redis connection."""
        if self.redis is None:
            self.redis = await get_redis()
        return self.redis

    @staticmethod
    def _quote_key(symbol: str) -> str:
        return f"quote:{symbol.strip().upper()}"

    async def _publish_change(self, alert_id: str):
        """Announce an alert mutation; the periodic resync covers lost messages."""
        try:
            redis = await self._get_redis()
            await redis.publish(self.CHANGES_CHANNEL, alert_id)
        except RedisError as e:
            logger.warning(f"Could not publish change for alert {alert_id}: {e}")

    # ----------------- alerts -----------------

    @bounded("save alert")
    async def save(self, alert: Alert) -> str:
        alert_id = alert.id or str(uuid.uuid4())
        try:
            async with self.session_factory() as db:
                await db.merge(PriceAlert(
                    id=alert_id,
                    symbol=alert.symbol,
                    current_price=alert.current_price,
                    target_price=alert.target_price,
                    direction=alert.direction.value,
                    active=alert.active,
                    created_at=alert.created_at,
                    user_id=alert.user_id,
                ))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save alert for {alert.symbol}: {e}", exc_info=True)
            raise StoreError(f"Failed to save alert: {e}") from e

        logger.info(f"Saved alert {alert_id} ({alert.symbol} {alert.direction.value} {alert.target_price:.2f})")
        await self._publish_change(alert_id)
        return alert_id

    @bounded("read alert")
    async def get(self, alert_id: str) -> Optional[Alert]:
        try:
            async with self.session_factory() as db:
                row = await db.get(PriceAlert, alert_id)
                return _to_alert(row) if row else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read alert {alert_id}: {e}") from e

    @bounded("list active alerts")
    async def list_active_snapshot(self) -> List[Alert]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(PriceAlert).where(PriceAlert.active == True)  # noqa: E712
                )
                return [_to_alert(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list active alerts: {e}") from e

    @bounded("list user alerts")
    async def list_user_alerts(self) -> List[Alert]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(PriceAlert)
                    .where(PriceAlert.user_id == self.user_id)
                    .order_by(desc(PriceAlert.created_at))
                )
                return [_to_alert(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list alerts for {self.user_id}: {e}") from e

    async def subscribe_active(self) -> AsyncIterator[List[Alert]]:
        try:
            redis = await self._get_redis()
            pubsub = redis.pubsub()
            await pubsub.subscribe(self.CHANGES_CHANNEL)
        except RedisError as e:
            raise StoreError(f"Failed to subscribe to alert changes: {e}") from e

        try:
            alerts = await self.list_active_snapshot()
            last = _fingerprint(alerts)
            yield alerts

            while True:
                try:
                    message = await pubsub.get_message(
                        ignore_subscribe_messages=True,
                        timeout=self.resync_seconds
                    )
                except RedisError as e:
                    raise StoreError(f"Alert change feed failed: {e}") from e

                if message is not None:
                    logger.debug(f"Alert change event: {message.get('data')}")

                alerts = await self.list_active_snapshot()
                current = _fingerprint(alerts)
                if current != last:
                    last = current
                    yield alerts
        finally:
            try:
                await pubsub.unsubscribe(self.CHANGES_CHANNEL)
                await pubsub.aclose()
            except RedisError as e:
                logger.debug(f"Error closing alert change subscription: {e}")

    @bounded("update alert")
    async def update(
        self,
        alert_id: str,
        target_price: Optional[float] = None,
        direction: Optional[AlertDirection] = None
    ) -> Alert:
        try:
            async with self.session_factory() as db:
                row = await db.get(PriceAlert, alert_id)
                if row is None:
                    raise AlertNotFound(alert_id)

                if target_price is not None:
                    row.target_price = target_price
                if direction is not None:
                    row.direction = AlertDirection(direction).value

                await db.commit()
                alert = _to_alert(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update alert {alert_id}: {e}") from e

        await self._publish_change(alert_id)
        return alert

    @bounded("deactivate alert")
    async def deactivate(self, alert_id: str) -> None:
        """Conditional update, so concurrent callers flip the flag at most once."""
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    update(PriceAlert)
                    .where(PriceAlert.id == alert_id, PriceAlert.active == True)  # noqa: E712
                    .values(active=False)
                )
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to deactivate alert {alert_id}: {e}") from e

        if result.rowcount:
            logger.info(f"Deactivated alert {alert_id}")
            await self._publish_change(alert_id)
        else:
            logger.debug(f"Alert {alert_id} already inactive or missing")

    @bounded("delete alert")
    async def delete(self, alert_id: str) -> None:
        try:
            async with self.session_factory() as db:
                result = await db.execute(delete(PriceAlert).where(PriceAlert.id == alert_id))
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete alert {alert_id}: {e}") from e

        if result.rowcount:
            logger.info(f"Deleted alert {alert_id}")
            await self._publish_change(alert_id)

    # ----------------- quotes -----------------

    @bounded("read last quote")
    async def get_last_quote(self, symbol: str) -> Optional[Quote]:
        try:
            redis = await self._get_redis()
            data = await redis.hgetall(self._quote_key(symbol))
        except RedisError as e:
            raise StoreError(f"Failed to read last quote for {symbol}: {e}") from e

        if not data:
            return None

        try:
            return Quote.from_dict(data)
        except (KeyError, ValueError) as e:
            logger.warning(f"Discarding malformed stored quote for {symbol}: {e}")
            return None

    @bounded("store quote")
    async def put_quote(self, quote: Quote) -> None:
        mapping = {k: str(v) for k, v in quote.to_dict().items()}
        try:
            redis = await self._get_redis()
            await redis.hset(self._quote_key(quote.symbol), mapping=mapping)
        except RedisError as e:
            raise StoreError(f"Failed to store quote for {quote.symbol}: {e}") from e

    # ----------------- history -----------------

    @bounded("append history")
    async def append_history(self, record: AlertHistoryRecord) -> None:
        try:
            async with self.session_factory() as db:
                db.add(AlertHistory(
                    alert_id=record.alert_id,
                    symbol=record.symbol,
                    target_price=record.target_price,
                    actual_price=record.actual_price,
                    direction=AlertDirection(record.direction).value,
                    triggered_at=record.triggered_at,
                    user_id=record.user_id,
                ))
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to append history for alert {record.alert_id}: {e}") from e

    @bounded("list history")
    async def list_history(self, limit: int = 50) -> List[AlertHistoryRecord]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(AlertHistory)
                    .where(AlertHistory.user_id == self.user_id)
                    .order_by(desc(AlertHistory.triggered_at))
                    .limit(limit)
                )
                return [_to_record(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list alert history: {e}") from e
