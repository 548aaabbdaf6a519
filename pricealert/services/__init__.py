"""Services package initialization."""
from pricealert.services.quote_cache import QuoteCache
from pricealert.services.quote_provider import QuoteProvider
from pricealert.services.alert_store import (
    Alert,
    AlertDirection,
    AlertHistoryRecord,
    AlertStore,
    InMemoryAlertStore
)
from pricealert.services.sql_alert_store import SqlAlertStore
from pricealert.services.alert_service import AlertService, ActionResult

__all__ = [
    "QuoteCache",
    "QuoteProvider",
    "Alert",
    "AlertDirection",
    "AlertHistoryRecord",
    "AlertStore",
    "InMemoryAlertStore",
    "SqlAlertStore",
    "AlertService",
    "ActionResult"
]
