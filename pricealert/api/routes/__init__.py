"""API routes package initialization."""
from pricealert.api.routes import alerts, quotes, history, health

__all__ = ["alerts", "quotes", "history", "health"]
