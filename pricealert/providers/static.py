"""Offline fallback quote source backed by a fixed price table."""
from typing import Dict, Optional
from pricealert.providers import QuoteSource, ProviderError
from pricealert.providers.models import Quote


# Last-resort reference prices for the most traded B3 symbols
DEFAULT_PRICE_TABLE: Dict[str, float] = {
    "PETR4": 35.50,
    "VALE3": 68.20,
    "ITUB4": 32.15,
    "BBDC4": 15.80,
    "ABEV3": 12.45,
    "WEGE3": 38.90,
    "RENT3": 45.60,
    "LREN3": 18.75,
    "MGLU3": 2.85,
    "JBSS3": 22.40,
}


class StaticQuoteSource(QuoteSource):
    """Secondary source that serves prices from a static table."""

    name = "static"

    def __init__(self, prices: Optional[Dict[str, float]] = None):
        table = DEFAULT_PRICE_TABLE if prices is None else prices
        self.prices = {symbol.upper(): float(price) for symbol, price in table.items()}

    async def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        price = self.prices.get(symbol)
        if price is None:
            raise ProviderError(f"Symbol {symbol} not in static price table")
        return Quote.from_prices(symbol, price)
