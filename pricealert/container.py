"""Wiring of store, quote provider, notification sink and monitor."""
from dataclasses import dataclass
import logging
from pricealert.core.config import settings
from pricealert.core.redis import close_redis
from pricealert.providers.static import StaticQuoteSource
from pricealert.providers.yahoo import YahooQuoteSource
from pricealert.services.alert_service import AlertService
from pricealert.services.alert_store import AlertStore, InMemoryAlertStore
from pricealert.services.quote_cache import QuoteCache
from pricealert.services.quote_provider import QuoteProvider
from pricealert.services.sql_alert_store import SqlAlertStore
from pricealert.workers.monitor_loop import MonitorLoop
from pricealert.workers.notification_sink import NotificationSink, build_notification_sink


logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Long-lived components shared by a process."""
    store: AlertStore
    provider: QuoteProvider
    sink: NotificationSink
    monitor: MonitorLoop
    service: AlertService

    async def close(self):
        """Stop the monitor and release sources, sink and store."""
        await self.monitor.stop()
        await self.provider.close()
        await self.sink.close()
        await self.store.close()
        if isinstance(self.store, SqlAlertStore):
            await close_redis()


def build_store() -> AlertStore:
    if settings.store_backend == "memory":
        logger.warning("Using in-memory alert store; alerts are lost on restart")
        return InMemoryAlertStore(settings.user_id)
    return SqlAlertStore(settings.user_id)


def build_provider() -> QuoteProvider:
    return QuoteProvider(
        primary=YahooQuoteSource(),
        fallback=StaticQuoteSource(),
        cache=QuoteCache(ttl_ms=settings.quote_cache_ttl_ms),
    )


def build_container(
    store: AlertStore = None,
    provider: QuoteProvider = None,
    sink: NotificationSink = None
) -> Container:
    """Build the component graph from settings; any part may be supplied."""
    store = store or build_store()
    provider = provider or build_provider()
    sink = sink or build_notification_sink()
    monitor = MonitorLoop(store, provider, sink)
    service = AlertService(store, provider, monitor)

    logger.info(
        f"Container built: store={type(store).__name__} "
        f"sources={provider.primary.name}/{provider.fallback.name} sink={type(sink).__name__}"
    )
    return Container(store=store, provider=provider, sink=sink, monitor=monitor, service=service)
