"""Data models for quote snapshots."""
from dataclasses import dataclass, asdict
from typing import Optional
import time


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Quote:
    """A price observation for a symbol at a point in time."""
    symbol: str
    price: float
    change: float
    change_percent: float
    observed_at: int  # epoch millis

    @classmethod
    def from_prices(
        cls,
        symbol: str,
        price: float,
        previous_close: Optional[float] = None,
        observed_at: Optional[int] = None
    ) -> "Quote":
        """
        Build a quote from the current and previous reference prices.

        A missing previous close is treated as equal to the current price,
        which yields a zero change.
        """
        if previous_close is None:
            previous_close = price

        change = price - previous_close
        change_percent = (change / previous_close * 100) if previous_close > 0 else 0.0

        return cls(
            symbol=symbol.strip().upper(),
            price=price,
            change=change,
            change_percent=change_percent,
            observed_at=observed_at if observed_at is not None else now_ms()
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Quote":
        """Hydrate a quote from a stored mapping (values may be strings)."""
        return cls(
            symbol=str(data["symbol"]).upper(),
            price=float(data["price"]),
            change=float(data.get("change", 0.0)),
            change_percent=float(data.get("change_percent", 0.0)),
            observed_at=int(float(data["observed_at"]))
        )

    def age_ms(self, now: Optional[int] = None) -> int:
        """Milliseconds elapsed since the quote was observed."""
        return (now if now is not None else now_ms()) - self.observed_at
