"""In-memory TTL cache for the most recent quote per symbol."""
from typing import Callable, Dict, NamedTuple, Optional
import threading
from pricealert.providers.models import Quote, now_ms


DEFAULT_TTL_MS = 30_000


class CacheEntry(NamedTuple):
    """Immutable cache slot: a quote and when it was fetched (epoch millis)."""
    quote: Quote
    fetched_at: int


class QuoteCache:
    """
    Symbol -> quote mapping with a freshness window.

    Entries are replaced wholesale and never mutated, and all access to the
    mapping goes through a lock, so concurrent readers and writers (asyncio
    tasks or threads) never observe a partially written entry.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] = now_ms):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(symbol: str) -> str:
        return symbol.strip().upper()

    def _is_fresh(self, entry: CacheEntry, now: int) -> bool:
        return now - entry.fetched_at < self.ttl_ms

    def get(self, symbol: str) -> Optional[Quote]:
        """Return the cached quote if present and fresh, else None."""
        key = self._key(symbol)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry, now):
                # Lazy eviction; only drop the entry we actually inspected
                del self._entries[key]
                return None
            return entry.quote

    def put(self, symbol: str, quote: Quote) -> None:
        """Store a quote, replacing any existing entry for the symbol."""
        entry = CacheEntry(quote=quote, fetched_at=self._clock())
        with self._lock:
            self._entries[self._key(symbol)] = entry

    def invalidate(self, symbol: str) -> None:
        with self._lock:
            self._entries.pop(self._key(symbol), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
