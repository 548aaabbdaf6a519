"""Monitoring loop: periodically checks active alerts and fires triggers."""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional
from pricealert.core.config import settings
from pricealert.core.exceptions import MonitorStateError, QuoteUnavailable, StoreError
from pricealert.providers.models import Quote, now_ms
from pricealert.services.alert_evaluator import Trigger, evaluate
from pricealert.services.alert_store import Alert, AlertStore
from pricealert.services.quote_provider import QuoteProvider
from pricealert.workers.notification_sink import DeliveryStatus, NotificationSink


logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    WAITING = "waiting"
    STOPPED = "stopped"


class AlertOutcome(str, Enum):
    NO_TRIGGER = "no_trigger"
    TRIGGERED = "triggered"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class CycleReport:
    """Counts of per-alert outcomes for one cycle."""
    checked: int = 0
    triggered: int = 0
    skipped: int = 0
    failed: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[AlertOutcome]) -> "CycleReport":
        report = cls()
        for outcome in outcomes:
            report.checked += 1
            if outcome == AlertOutcome.TRIGGERED:
                report.triggered += 1
            elif outcome == AlertOutcome.SKIPPED:
                report.skipped += 1
            elif outcome == AlertOutcome.FAILED:
                report.failed += 1
        return report


class MonitorLoop:
    """
    Background monitor for active price alerts.

    Lifecycle: IDLE -> RUNNING <-> WAITING -> STOPPED. One long-lived task
    runs the periodic cycles; within a cycle alerts are processed
    concurrently (bounded by max_concurrency) and awaited together, so
    scheduled cycles never overlap. check_now() runs an extra cycle
    out-of-band. An optional live-feed task reacts to changes in the active
    alert list.

    Two cycles may both see the same alert as active and both notify; the
    store's idempotent deactivate() keeps the final state consistent.
    """

    def __init__(
        self,
        store: AlertStore,
        provider: QuoteProvider,
        sink: NotificationSink,
        startup_delay: Optional[float] = None,
        interval: Optional[float] = None,
        error_backoff: Optional[float] = None,
        max_concurrency: Optional[int] = None,
        stored_quote_max_age: Optional[float] = settings.stored_quote_max_age_seconds,
        live_feed: Optional[bool] = None,
        clock: Callable[[], int] = now_ms
    ):
        self.store = store
        self.provider = provider
        self.sink = sink
        self.startup_delay = settings.monitor_startup_delay_seconds if startup_delay is None else startup_delay
        self.interval = settings.monitor_interval_seconds if interval is None else interval
        self.error_backoff = settings.monitor_error_backoff_seconds if error_backoff is None else error_backoff
        self.max_concurrency = max_concurrency or settings.quote_max_concurrency
        self.stored_quote_max_age = stored_quote_max_age
        self.live_feed = settings.monitor_live_feed if live_feed is None else live_feed
        self._clock = clock

        self._state = MonitorState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._feed_task: Optional[asyncio.Task] = None
        self.cycles_completed = 0

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in (MonitorState.RUNNING, MonitorState.WAITING)

    # ----------------- lifecycle -----------------

    def start(self):
        """Start the periodic loop. Must be called with a running event loop."""
        if self._state != MonitorState.IDLE:
            raise MonitorStateError(f"Cannot start monitor in state {self._state.value}")

        logger.info("=" * 60)
        logger.info("Starting alert monitor...")
        logger.info(f"Startup delay: {self.startup_delay}s")
        logger.info(f"Cycle interval: {self.interval}s")
        logger.info(f"Error backoff: {self.error_backoff}s")
        logger.info(f"Live feed: {self.live_feed}")
        logger.info("=" * 60)

        self._state = MonitorState.RUNNING
        self._task = asyncio.create_task(self._run(), name="alert-monitor")
        if self.live_feed:
            self._feed_task = asyncio.create_task(self._watch_active(), name="alert-monitor-feed")

    async def stop(self):
        """
        Stop the monitor. Safe to call from any task and more than once.

        Cancels pending waits; once this returns no new cycle will start.
        """
        if self._state == MonitorState.STOPPED:
            return

        self._state = MonitorState.STOPPED
        current = asyncio.current_task()
        tasks = [t for t in (self._task, self._feed_task) if t is not None and t is not current]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        logger.info("Alert monitor stopped")

    async def check_now(self) -> CycleReport:
        """
        Run one cycle immediately, outside the periodic schedule.

        Raises:
            MonitorStateError: If the monitor is not running
            StoreError: If the active alert list cannot be read
        """
        if not self.is_active:
            raise MonitorStateError(f"Cannot check alerts while monitor is {self._state.value}")

        logger.info("Manual alert check requested")
        return await self.run_cycle(origin="manual")

    # ----------------- periodic loop -----------------

    async def _run(self):
        if self.startup_delay > 0:
            logger.info(f"Waiting {self.startup_delay}s before first monitoring cycle...")
            await asyncio.sleep(self.startup_delay)

        while self._state != MonitorState.STOPPED:
            self._state = MonitorState.RUNNING
            try:
                await self.run_cycle(origin="scheduled")
                delay = self.interval
            except Exception as e:
                logger.error(f"Monitoring cycle failed, retrying in {self.error_backoff}s: {e}", exc_info=True)
                delay = self.error_backoff

            if self._state == MonitorState.STOPPED:
                break

            self._state = MonitorState.WAITING
            await asyncio.sleep(delay)

    async def run_cycle(self, origin: str = "scheduled") -> CycleReport:
        """List active alerts and process each one. Listing errors propagate."""
        alerts = await self.store.list_active_snapshot()
        logger.info(f"Checking {len(alerts)} active alerts ({origin})")
        report = await self._process_alerts(alerts)
        self.cycles_completed += 1
        logger.info(
            f"Cycle complete ({origin}): checked={report.checked} triggered={report.triggered} "
            f"skipped={report.skipped} failed={report.failed}"
        )
        return report

    async def _process_alerts(self, alerts: List[Alert]) -> CycleReport:
        if not alerts:
            return CycleReport()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(alert: Alert) -> AlertOutcome:
            async with semaphore:
                return await self.process_alert(alert)

        outcomes = await asyncio.gather(*(_bounded(a) for a in alerts))
        return CycleReport.from_outcomes(outcomes)

    # ----------------- live feed -----------------

    async def _watch_active(self):
        """Re-check alerts whenever the active list changes."""
        while self._state != MonitorState.STOPPED:
            try:
                await self._consume_feed()
            except Exception as e:
                logger.error(f"Alert feed failed, resubscribing in {self.error_backoff}s: {e}", exc_info=True)

            if self._state == MonitorState.STOPPED:
                break
            await asyncio.sleep(self.error_backoff)

    async def _consume_feed(self):
        first = True
        async for alerts in self.store.subscribe_active():
            if first:
                # Baseline list; the periodic cycle covers it
                first = False
                continue
            if self._state == MonitorState.STOPPED:
                return
            logger.debug(f"Active alert list changed ({len(alerts)} alerts)")
            await self._process_alerts(alerts)

    # ----------------- per-alert path -----------------

    def _is_recent(self, quote: Quote) -> bool:
        if self.stored_quote_max_age is None:
            return True
        return quote.age_ms(self._clock()) <= self.stored_quote_max_age * 1000

    async def resolve_quote(self, symbol: str) -> Optional[Quote]:
        """
        Resolve a quote: stored last-known price first, then the provider.

        When stored_quote_max_age is set, an older stored quote is refreshed
        from the provider and only used if the provider has nothing.
        """
        try:
            stored = await self.store.get_last_quote(symbol)
        except StoreError as e:
            logger.warning(f"Could not read stored quote for {symbol}: {e}")
            stored = None

        if stored is not None and self._is_recent(stored):
            return stored

        try:
            return await self.provider.fetch(symbol)
        except QuoteUnavailable as e:
            if stored is not None:
                logger.warning(f"{e}; using stale stored quote for {symbol}")
                return stored
            logger.warning(str(e))
            return None

    async def process_alert(self, alert: Alert) -> AlertOutcome:
        """Check one alert. Never raises (except on cancellation)."""
        try:
            quote = await self.resolve_quote(alert.symbol)
            if quote is None:
                logger.warning(f"No price for {alert.symbol}, alert {alert.id} retried next cycle")
                return AlertOutcome.SKIPPED

            try:
                await self.store.put_quote(quote)
            except StoreError as e:
                logger.warning(f"Could not persist quote for {alert.symbol}: {e}")

            decision = evaluate(alert, quote, now=self._clock())
            logger.debug(
                f"Alert {alert.id} {alert.symbol} {alert.direction.value} target={alert.target_price:.2f} "
                f"price={quote.price:.2f} -> {type(decision).__name__}"
            )

            if not isinstance(decision, Trigger):
                return AlertOutcome.NO_TRIGGER

            await self._fire(alert, decision)
            return AlertOutcome.TRIGGERED

        except Exception as e:
            logger.error(f"Error checking alert {alert.id} ({alert.symbol}): {e}", exc_info=True)
            return AlertOutcome.FAILED

    async def _fire(self, alert: Alert, trigger: Trigger):
        logger.info(f"🚨 Triggering alert {alert.id} for {alert.symbol}")

        status = await self.sink.notify(trigger.title, trigger.message, trigger.topic)
        if status == DeliveryStatus.SUPPRESSED:
            logger.info(f"Notification for alert {alert.id} suppressed")

        await self.store.deactivate(alert.id)

        try:
            await self.store.append_history(trigger.record)
        except StoreError as e:
            logger.error(f"Failed to record history for alert {alert.id}: {e}")
