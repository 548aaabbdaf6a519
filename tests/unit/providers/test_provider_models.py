"""Unit tests for Quote model.

This module tests change computation, serialization and age calculation.
"""
import pytest

from pricealert.providers.models import Quote


@pytest.mark.unit
class TestQuoteFromPrices:
    """Test Quote.from_prices constructor."""

    def test_change_and_percent(self):
        """✅ 35.50 vs previous close 35.00 → +0.50 / ~1.4286%."""
        quote = Quote.from_prices("petr4", 35.50, 35.00, observed_at=1000)

        assert quote.symbol == "PETR4"
        assert quote.change == pytest.approx(0.50)
        assert quote.change_percent == pytest.approx(1.4286, abs=1e-4)
        assert quote.observed_at == 1000

    def test_missing_previous_close(self):
        """✅ Missing previous close → zero change."""
        quote = Quote.from_prices("VALE3", 68.20)

        assert quote.change == 0.0
        assert quote.change_percent == 0.0

    def test_non_positive_previous_close(self):
        """✅ Previous close of zero → percent change 0 (no division)."""
        quote = Quote.from_prices("MGLU3", 2.85, 0.0)

        assert quote.change == pytest.approx(2.85)
        assert quote.change_percent == 0.0

    def test_negative_change(self):
        """✅ Price below previous close → negative change."""
        quote = Quote.from_prices("ABEV3", 12.00, 12.50)

        assert quote.change == pytest.approx(-0.50)
        assert quote.change_percent == pytest.approx(-4.0)


@pytest.mark.unit
class TestQuoteSerialization:
    """Test dict conversion used by the Redis quote hashes."""

    def test_from_string_mapping(self):
        """✅ Hydrates from string values as returned by Redis."""
        quote = Quote.from_dict({
            "symbol": "petr4",
            "price": "35.5",
            "change": "0.5",
            "change_percent": "1.42",
            "observed_at": "1700000000000"
        })

        assert quote.symbol == "PETR4"
        assert quote.price == 35.5
        assert quote.observed_at == 1_700_000_000_000

    def test_to_dict_keys(self):
        """✅ to_dict exposes every field."""
        data = Quote.from_prices("PETR4", 35.5, observed_at=5).to_dict()
        assert set(data) == {"symbol", "price", "change", "change_percent", "observed_at"}

    def test_age(self):
        """✅ Age is measured against the given instant."""
        quote = Quote.from_prices("PETR4", 35.5, observed_at=1_000)
        assert quote.age_ms(now=31_000) == 30_000
