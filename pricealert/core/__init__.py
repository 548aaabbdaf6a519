"""Core package initialization."""
from pricealert.core.config import settings
from pricealert.core.database import Base, init_db
from pricealert.core.redis import get_redis, close_redis
from pricealert.core.exceptions import (
    QuoteUnavailable,
    StoreError,
    AlertNotFound,
    MonitorStateError,
    AlertValidationError,
)

__all__ = [
    "settings",
    "Base",
    "init_db",
    "get_redis",
    "close_redis",
    "QuoteUnavailable",
    "StoreError",
    "AlertNotFound",
    "MonitorStateError",
    "AlertValidationError",
]
