"""Yahoo Finance chart endpoint quote source."""
import httpx
from typing import Optional
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
import logging
from pricealert.providers import QuoteSource, ProviderError
from pricealert.providers.models import Quote
from pricealert.core.config import settings


logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class YahooQuoteSource(QuoteSource):
    """Primary quote source backed by the Yahoo Finance chart API."""

    name = "yahoo"

    def __init__(
        self,
        base_url: Optional[str] = None,
        market_suffix: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = (base_url or settings.quote_base_url).rstrip("/")
        self.market_suffix = settings.market_suffix if market_suffix is None else market_suffix
        self.client = httpx.AsyncClient(
            timeout=timeout or settings.quote_timeout_seconds,
            headers={"User-Agent": USER_AGENT}
        )

    def market_symbol(self, symbol: str) -> str:
        """Append the market suffix (e.g. PETR4 -> PETR4.SA) unless present."""
        symbol = symbol.strip().upper()
        suffix = self.market_suffix.upper()
        if suffix and not symbol.endswith(suffix):
            return f"{symbol}{suffix}"
        return symbol

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    async def _make_request(self, url: str, params: dict) -> dict:
        """Make HTTP request with retry logic for transient failures.

        Retries up to 3 times with exponential backoff for timeouts and
        connection errors. HTTP status errors are not retried.
        """
        response = await self.client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def get_quote(self, symbol: str) -> Quote:
        """
        Fetch the latest regular-market price for a symbol.

        Raises:
            ProviderError: On HTTP, network or payload errors, and when the
                result set is empty.
        """
        symbol = symbol.strip().upper()
        market_symbol = self.market_symbol(symbol)
        url = f"{self.base_url}/v8/finance/chart/{market_symbol}"
        params = {"interval": "1d", "range": "1d"}

        logger.debug(f"Requesting Yahoo quote for {market_symbol}")

        try:
            data = await self._make_request(url, params)
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == 403:
                raise ProviderError(f"Yahoo Finance access denied (403) for {market_symbol}")
            elif status_code == 404:
                raise ProviderError(f"Yahoo Finance has no instrument {market_symbol} (404)")
            elif status_code == 429:
                raise ProviderError(
                    "Yahoo Finance rate limit exceeded (429). Please wait before making more requests."
                )
            raise ProviderError(f"Yahoo Finance API error: {str(e)}")
        except httpx.TimeoutException as e:
            raise ProviderError(f"Yahoo Finance timeout after retries: {str(e)}")
        except httpx.HTTPError as e:
            raise ProviderError(f"Yahoo Finance connection error: {str(e)}")
        except ValueError as e:
            raise ProviderError(f"Yahoo Finance returned malformed JSON: {str(e)}")

        return self._parse_chart(symbol, data)

    def _parse_chart(self, symbol: str, data: dict) -> Quote:
        """Parse a chart payload into a Quote."""
        if not isinstance(data, dict):
            raise ProviderError(f"Unexpected payload type for {symbol}: {type(data).__name__}")

        chart = data.get("chart") or {}
        if chart.get("error"):
            raise ProviderError(f"Yahoo Finance error for {symbol}: {chart['error']}")

        results = chart.get("result") or []
        if not results:
            raise ProviderError(f"No results for {symbol}")

        first = results[0] or {}
        meta = first.get("meta") or {}

        if "timestamp" not in first:
            # Market closed or no trades yet; meta still carries the last price
            logger.warning(f"No timestamps in chart result for {symbol}")

        try:
            price = float(meta["regularMarketPrice"])
        except (KeyError, TypeError, ValueError):
            raise ProviderError(f"Missing regularMarketPrice for {symbol}")

        previous_close = meta.get("previousClose")
        if previous_close is None:
            logger.warning(f"previousClose missing for {symbol}, using current price")
        else:
            try:
                previous_close = float(previous_close)
            except (TypeError, ValueError):
                logger.warning(f"previousClose not numeric for {symbol}, using current price")
                previous_close = None

        quote = Quote.from_prices(symbol, price, previous_close)
        logger.debug(f"Yahoo quote for {symbol}: {quote.price:.2f}")
        return quote

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
