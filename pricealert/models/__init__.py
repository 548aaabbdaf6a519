"""Models package initialization."""
from pricealert.models.alert import PriceAlert, AlertHistory

__all__ = [
    "PriceAlert",
    "AlertHistory"
]
