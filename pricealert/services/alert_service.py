"""User-initiated alert actions, reported as results with a reason."""
from dataclasses import dataclass
from typing import List, Optional
import logging
import math
import re
from pricealert.core.exceptions import (
    AlertNotFound,
    AlertValidationError,
    MonitorStateError,
    QuoteUnavailable,
    StoreError,
)
from pricealert.providers.models import Quote
from pricealert.services.alert_store import Alert, AlertDirection, AlertHistoryRecord, AlertStore
from pricealert.services.quote_provider import QuoteProvider


logger = logging.getLogger(__name__)

# Symbol validation pattern: 1-10 uppercase letters/digits (e.g. PETR4, VALE3)
SYMBOL_PATTERN = re.compile(r'^[A-Z0-9]{1,10}$')


def validate_symbol(symbol: str) -> str:
    """
    Validate and normalize a symbol.

    Raises:
        AlertValidationError: If the symbol format is invalid
    """
    if not symbol or not symbol.strip():
        raise AlertValidationError("Symbol cannot be empty")

    normalized = symbol.strip().upper()

    if not SYMBOL_PATTERN.match(normalized):
        raise AlertValidationError(
            f"Invalid symbol format: '{symbol}'. "
            "Symbol must be 1-10 letters or digits."
        )

    return normalized


def validate_target_price(target_price) -> float:
    try:
        value = float(target_price)
    except (TypeError, ValueError):
        raise AlertValidationError("Target price must be a valid number")
    if not math.isfinite(value):
        raise AlertValidationError("Target price must be a finite number")
    if value <= 0:
        raise AlertValidationError("Target price must be greater than zero")
    return value


def validate_direction(direction) -> AlertDirection:
    try:
        return AlertDirection(str(getattr(direction, "value", direction)).upper())
    except ValueError:
        raise AlertValidationError(f"Direction must be ABOVE or BELOW, got {direction}")


class ActionError:
    """Failure categories surfaced with an ActionResult."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    CONFLICT = "conflict"


@dataclass
class ActionResult:
    """Outcome of a user action."""
    ok: bool
    reason: str = ""
    alert_id: Optional[str] = None
    alert: Optional[Alert] = None
    error: Optional[str] = None  # one of ActionError when ok is False

    @classmethod
    def success(cls, reason: str, alert_id: Optional[str] = None, alert: Optional[Alert] = None):
        return cls(ok=True, reason=reason, alert_id=alert_id, alert=alert)

    @classmethod
    def failure(cls, reason: str, error: str, alert_id: Optional[str] = None):
        return cls(ok=False, reason=reason, alert_id=alert_id, error=error)


class AlertService:
    """Create, edit, delete and test alerts on behalf of the configured user."""

    def __init__(self, store: AlertStore, provider: QuoteProvider, monitor=None):
        self.store = store
        self.provider = provider
        self.monitor = monitor

    @property
    def user_id(self) -> str:
        return self.store.user_id

    async def create_alert(
        self,
        symbol: str,
        target_price: float,
        direction,
        current_price: Optional[float] = None
    ) -> ActionResult:
        """
        Create and persist a new active alert.

        When current_price is not given, the current quote is looked up;
        a missing quote is recorded as 0.0 rather than failing the action.
        """
        try:
            symbol = validate_symbol(symbol)
            target_price = validate_target_price(target_price)
            direction = validate_direction(direction)
        except AlertValidationError as e:
            return ActionResult.failure(str(e), ActionError.VALIDATION)

        if current_price is None:
            try:
                current_price = (await self.provider.fetch(symbol)).price
            except QuoteUnavailable as e:
                logger.info(f"Creating alert without current price: {e}")
                current_price = 0.0

        alert = Alert(
            symbol=symbol,
            current_price=current_price,
            target_price=target_price,
            direction=direction,
            user_id=self.user_id,
        )

        try:
            alert_id = await self.store.save(alert)
        except StoreError as e:
            logger.error(f"Failed to create alert for {symbol}: {e}")
            return ActionResult.failure(f"Error creating alert: {e}", ActionError.UNAVAILABLE)

        alert.id = alert_id
        logger.info(f"Alert created: {alert_id}")
        return ActionResult.success(f"Alert created successfully! ID: {alert_id}", alert_id, alert)

    async def create_near_market_alert(
        self,
        symbol: str,
        direction,
        offset_pct: float = 1.0
    ) -> ActionResult:
        """
        Create an alert whose target sits offset_pct away from the current price.

        ABOVE targets are placed above the current price and BELOW targets
        below it, which makes a trigger easy to provoke while testing.
        """
        try:
            symbol = validate_symbol(symbol)
            direction = validate_direction(direction)
        except AlertValidationError as e:
            return ActionResult.failure(str(e), ActionError.VALIDATION)

        try:
            current_price = (await self.provider.fetch(symbol)).price
        except QuoteUnavailable:
            return ActionResult.failure(
                f"Could not get the current price of {symbol}", ActionError.UNAVAILABLE
            )

        delta = current_price * offset_pct / 100
        target = current_price + delta if direction == AlertDirection.ABOVE else current_price - delta

        return await self.create_alert(symbol, target, direction, current_price=current_price)

    async def update_alert(
        self,
        alert_id: str,
        target_price: Optional[float] = None,
        direction=None
    ) -> ActionResult:
        """Edit the target price and/or direction of an active alert."""
        try:
            if target_price is not None:
                target_price = validate_target_price(target_price)
            if direction is not None:
                direction = validate_direction(direction)
        except AlertValidationError as e:
            return ActionResult.failure(str(e), ActionError.VALIDATION, alert_id)

        if target_price is None and direction is None:
            return ActionResult.failure("Nothing to update", ActionError.VALIDATION, alert_id)

        try:
            existing = await self.store.get(alert_id)
            if existing is None:
                return ActionResult.failure(f"Alert {alert_id} not found", ActionError.NOT_FOUND, alert_id)
            if not existing.active:
                return ActionResult.failure(
                    f"Alert {alert_id} is no longer active", ActionError.CONFLICT, alert_id
                )
            alert = await self.store.update(alert_id, target_price=target_price, direction=direction)
        except AlertNotFound:
            return ActionResult.failure(f"Alert {alert_id} not found", ActionError.NOT_FOUND, alert_id)
        except StoreError as e:
            return ActionResult.failure(f"Error updating alert: {e}", ActionError.UNAVAILABLE, alert_id)

        return ActionResult.success("Alert updated", alert_id, alert)

    async def deactivate_alert(self, alert_id: str) -> ActionResult:
        try:
            existing = await self.store.get(alert_id)
            if existing is None:
                return ActionResult.failure(f"Alert {alert_id} not found", ActionError.NOT_FOUND, alert_id)
            await self.store.deactivate(alert_id)
        except StoreError as e:
            return ActionResult.failure(f"Error deactivating alert: {e}", ActionError.UNAVAILABLE, alert_id)

        return ActionResult.success("Alert deactivated", alert_id)

    async def delete_alert(self, alert_id: str) -> ActionResult:
        try:
            existing = await self.store.get(alert_id)
            if existing is None:
                return ActionResult.failure(f"Alert {alert_id} not found", ActionError.NOT_FOUND, alert_id)
            await self.store.delete(alert_id)
        except StoreError as e:
            return ActionResult.failure(f"Error deleting alert: {e}", ActionError.UNAVAILABLE, alert_id)

        return ActionResult.success("Alert deleted", alert_id)

    async def simulate_price_change(self, symbol: str, percentage_change: float) -> ActionResult:
        """
        Store a simulated quote moved by percentage_change and re-check alerts.

        The simulated quote becomes the symbol's last-known price, which the
        monitor reads before asking the quote provider.
        """
        try:
            symbol = validate_symbol(symbol)
        except AlertValidationError as e:
            return ActionResult.failure(str(e), ActionError.VALIDATION)

        try:
            current = await self.provider.fetch(symbol)
        except QuoteUnavailable:
            return ActionResult.failure(
                f"Could not get the current price of {symbol}", ActionError.UNAVAILABLE
            )

        new_price = current.price + current.price * percentage_change / 100
        simulated = Quote.from_prices(symbol, new_price, current.price)

        try:
            await self.store.put_quote(simulated)
        except StoreError as e:
            return ActionResult.failure(f"Error storing simulated price: {e}", ActionError.UNAVAILABLE)

        sign = "+" if percentage_change >= 0 else ""
        reason = f"Simulated price for {symbol}: {new_price:.2f} ({sign}{percentage_change:.2f}%)"

        if self.monitor is not None:
            try:
                report = await self.monitor.check_now()
                reason = f"{reason}; {report.triggered} alert(s) triggered"
            except (MonitorStateError, StoreError) as e:
                logger.warning(f"Alert check after simulation skipped: {e}")

        return ActionResult.success(reason)

    async def check_now(self):
        """Run an out-of-band monitor cycle. Raises MonitorStateError without a monitor."""
        if self.monitor is None:
            raise MonitorStateError("No monitor attached")
        return await self.monitor.check_now()

    async def list_alerts(self) -> List[Alert]:
        return await self.store.list_user_alerts()

    async def list_history(self, limit: int = 50) -> List[AlertHistoryRecord]:
        return await self.store.list_history(limit)

    async def get_quote(self, symbol: str, force: bool = False) -> Quote:
        """Current quote for a symbol. Raises QuoteUnavailable."""
        symbol = validate_symbol(symbol)
        if force:
            return await self.provider.force_refresh(symbol)
        return await self.provider.fetch(symbol)

    def clear_quote_cache(self) -> None:
        self.provider.clear_cache()
