"""Quote resolution with cache, primary source and fallback source."""
import asyncio
import logging
from typing import Dict, Iterable, List, Optional
from pricealert.core.config import settings
from pricealert.core.exceptions import QuoteUnavailable
from pricealert.providers import QuoteSource, ProviderError
from pricealert.providers.models import Quote
from pricealert.services.quote_cache import QuoteCache


logger = logging.getLogger(__name__)


class QuoteProvider:
    """
    Fetches current quotes, isolating callers from network and parse failures.

    Lookup order is cache, then the primary source, then the fallback source.
    Whichever source answers populates the cache.
    """

    def __init__(
        self,
        primary: QuoteSource,
        fallback: QuoteSource,
        cache: Optional[QuoteCache] = None,
        max_concurrency: Optional[int] = None,
        popular_symbols: Optional[List[str]] = None
    ):
        self.primary = primary
        self.fallback = fallback
        self.cache = cache if cache is not None else QuoteCache(ttl_ms=settings.quote_cache_ttl_ms)
        self.max_concurrency = max_concurrency or settings.quote_max_concurrency
        self.popular_symbols = (
            popular_symbols if popular_symbols is not None else settings.popular_symbols_list
        )

    async def _from_source(self, source: QuoteSource, symbol: str) -> Optional[Quote]:
        """Ask one source for a quote; any failure is logged and yields None."""
        try:
            return await source.get_quote(symbol)
        except ProviderError as e:
            logger.warning(f"{source.name} source failed for {symbol}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error from {source.name} source for {symbol}: {e}", exc_info=True)
        return None

    async def fetch(self, symbol: str) -> Quote:
        """
        Get the current quote for a symbol.

        Args:
            symbol: Symbol in any case, without market suffix

        Returns:
            Quote keyed by the uppercase symbol

        Raises:
            QuoteUnavailable: If neither source produced a quote
        """
        symbol = symbol.strip().upper()

        cached = self.cache.get(symbol)
        if cached is not None:
            logger.debug(f"Using cached quote for {symbol}: {cached.price:.2f}")
            return cached

        logger.debug(f"Cache miss for {symbol}, querying {self.primary.name}")
        quote = await self._from_source(self.primary, symbol)

        if quote is None:
            logger.info(f"Primary source failed for {symbol}, trying {self.fallback.name}")
            quote = await self._from_source(self.fallback, symbol)

        if quote is None:
            raise QuoteUnavailable(symbol, "all sources failed")

        self.cache.put(symbol, quote)
        return quote

    async def fetch_many(self, symbols: Iterable[str]) -> Dict[str, Quote]:
        """
        Fetch quotes for several symbols concurrently.

        Symbols that cannot be resolved are left out of the result.
        """
        unique = list(dict.fromkeys(s.strip().upper() for s in symbols if s and s.strip()))
        if not unique:
            return {}

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(symbol: str) -> Optional[Quote]:
            async with semaphore:
                try:
                    return await self.fetch(symbol)
                except QuoteUnavailable as e:
                    logger.debug(f"Skipping {symbol} in batch: {e}")
                    return None

        quotes = await asyncio.gather(*(_bounded(s) for s in unique))
        return {symbol: quote for symbol, quote in zip(unique, quotes) if quote is not None}

    async def force_refresh(self, symbol: str) -> Quote:
        """Bypass the cache and fetch a fresh quote."""
        self.cache.invalidate(symbol)
        return await self.fetch(symbol)

    async def fetch_popular(self) -> Dict[str, Quote]:
        """Fetch quotes for the configured popular symbols."""
        return await self.fetch_many(self.popular_symbols)

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Quote cache cleared")

    async def close(self):
        """Close underlying sources."""
        await self.primary.close()
        await self.fallback.close()
