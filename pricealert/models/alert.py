"""Price alert and alert history database models."""
from sqlalchemy import Column, String, Float, Boolean, BigInteger, Index
import time
import uuid
from pricealert.core.database import Base


def _now_ms() -> int:
    return int(time.time() * 1000)


class PriceAlert(Base):
    """A user-defined target price and direction for a symbol."""

    __tablename__ = "price_alerts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    symbol = Column(String, nullable=False, index=True)
    current_price = Column(Float, nullable=False, default=0.0)
    target_price = Column(Float, nullable=False)
    direction = Column(String, nullable=False)  # ABOVE or BELOW
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(BigInteger, nullable=False, default=_now_ms)  # epoch millis
    user_id = Column(String, nullable=False, index=True)

    __table_args__ = (
        Index("ix_price_alerts_user_active", "user_id", "active"),
    )


class AlertHistory(Base):
    """Append-only record of a triggered alert."""

    __tablename__ = "alert_history"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    alert_id = Column(String, nullable=False, index=True)
    symbol = Column(String, nullable=False)
    target_price = Column(Float, nullable=False)
    actual_price = Column(Float, nullable=False)
    direction = Column(String, nullable=False)
    triggered_at = Column(BigInteger, nullable=False, index=True)  # epoch millis
    user_id = Column(String, nullable=False, index=True)
