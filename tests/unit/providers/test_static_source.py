"""Unit tests for StaticQuoteSource."""
import pytest

from pricealert.providers import ProviderError
from pricealert.providers.static import StaticQuoteSource, DEFAULT_PRICE_TABLE


@pytest.mark.unit
@pytest.mark.asyncio
class TestStaticQuoteSource:
    """Test the fixed-table fallback source."""

    async def test_known_symbol(self):
        """✅ Known symbol → table price, zero change."""
        source = StaticQuoteSource()

        quote = await source.get_quote("petr4")

        assert quote.symbol == "PETR4"
        assert quote.price == 35.50
        assert quote.change == 0.0

    async def test_unknown_symbol(self):
        """❌ Unknown symbol → ProviderError."""
        source = StaticQuoteSource()

        with pytest.raises(ProviderError):
            await source.get_quote("XXXX3")

    async def test_custom_table(self):
        """✅ Custom table replaces the defaults."""
        source = StaticQuoteSource({"abcd3": 10})

        assert (await source.get_quote("ABCD3")).price == 10.0
        with pytest.raises(ProviderError):
            await source.get_quote("PETR4")


@pytest.mark.unit
def test_default_table_size():
    """✅ Default table covers the ten popular symbols."""
    assert len(DEFAULT_PRICE_TABLE) == 10
    assert DEFAULT_PRICE_TABLE["MGLU3"] == 2.85
