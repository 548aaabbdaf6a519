"""Abstract interface for quote sources."""
from abc import ABC, abstractmethod
from pricealert.providers.models import Quote


class QuoteSource(ABC):
    """Abstract base class for quote data sources."""

    name = "abstract"

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """
        Fetch the current quote for a symbol.

        Args:
            symbol: Uppercase symbol without market suffix

        Returns:
            Quote for the symbol

        Raises:
            ProviderError: If the source cannot produce a quote
        """
        pass

    async def close(self):
        """Release any resources held by the source."""
        pass


class ProviderError(Exception):
    """Exception raised when a quote source fails."""
    pass
