"""Unit tests for YahooQuoteSource.

This module tests the Yahoo Finance chart integration including URL
construction, response parsing, and error handling.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
import httpx

from pricealert.providers.yahoo import YahooQuoteSource
from pricealert.providers import ProviderError


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mock_client():
    """Mock httpx AsyncClient."""
    with patch("httpx.AsyncClient") as mock:
        client_instance = AsyncMock()
        mock.return_value = client_instance
        yield client_instance


@pytest.fixture
def source(mock_client):
    """Create YahooQuoteSource instance."""
    return YahooQuoteSource(base_url="https://yahoo.test", market_suffix=".SA", timeout=1)


def chart_response(meta: dict, with_timestamp: bool = True) -> MagicMock:
    result = {"meta": meta}
    if with_timestamp:
        result["timestamp"] = [1700000000]
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"chart": {"result": [result], "error": None}}
    return resp


def status_error(code: int) -> MagicMock:
    resp = MagicMock()
    resp.status_code = code
    resp.raise_for_status.side_effect = httpx.HTTPStatusError(
        f"HTTP {code}", request=MagicMock(), response=resp
    )
    return resp


# ============================================================================
# Tests for market_symbol
# ============================================================================

@pytest.mark.unit
class TestMarketSymbol:
    """Test market suffix handling."""

    def test_appends_suffix(self, source):
        """✅ Suffix appended to bare symbol."""
        assert source.market_symbol("petr4") == "PETR4.SA"

    def test_keeps_existing_suffix(self, source):
        """✅ Symbol already carrying the suffix is unchanged."""
        assert source.market_symbol("PETR4.SA") == "PETR4.SA"


# ============================================================================
# Tests for get_quote
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestGetQuote:
    """Test get_quote method."""

    async def test_success(self, source, mock_client):
        """✅ Success → Quote with change from previous close."""
        mock_client.get.return_value = chart_response(
            {"regularMarketPrice": 35.50, "previousClose": 35.00}
        )

        quote = await source.get_quote("petr4")

        assert quote.symbol == "PETR4"
        assert quote.price == 35.50
        assert quote.change == pytest.approx(0.50)
        assert quote.change_percent == pytest.approx(1.4286, abs=1e-4)

        args, kwargs = mock_client.get.call_args
        assert args[0] == "https://yahoo.test/v8/finance/chart/PETR4.SA"
        assert kwargs["params"] == {"interval": "1d", "range": "1d"}

    async def test_missing_previous_close(self, source, mock_client):
        """✅ Missing previousClose → zero change."""
        mock_client.get.return_value = chart_response({"regularMarketPrice": 68.20})

        quote = await source.get_quote("VALE3")

        assert quote.price == 68.20
        assert quote.change == 0.0
        assert quote.change_percent == 0.0

    async def test_missing_timestamp_still_parses(self, source, mock_client):
        """✅ Result without timestamps still yields a quote from meta."""
        mock_client.get.return_value = chart_response(
            {"regularMarketPrice": 32.15, "previousClose": 32.00}, with_timestamp=False
        )

        quote = await source.get_quote("ITUB4")
        assert quote.price == 32.15

    async def test_empty_results(self, source, mock_client):
        """❌ Empty result set → ProviderError."""
        resp = MagicMock()
        resp.json.return_value = {"chart": {"result": [], "error": None}}
        mock_client.get.return_value = resp

        with pytest.raises(ProviderError, match="No results"):
            await source.get_quote("PETR4")

    async def test_chart_error(self, source, mock_client):
        """❌ chart.error present → ProviderError."""
        resp = MagicMock()
        resp.json.return_value = {"chart": {"result": None, "error": {"code": "Not Found"}}}
        mock_client.get.return_value = resp

        with pytest.raises(ProviderError):
            await source.get_quote("XXXX3")

    async def test_missing_price(self, source, mock_client):
        """❌ Missing regularMarketPrice → ProviderError."""
        mock_client.get.return_value = chart_response({"previousClose": 35.00})

        with pytest.raises(ProviderError, match="regularMarketPrice"):
            await source.get_quote("PETR4")

    async def test_404(self, source, mock_client):
        """❌ 404 → ProviderError without retry."""
        mock_client.get.return_value = status_error(404)

        with pytest.raises(ProviderError, match="404"):
            await source.get_quote("XXXX3")
        assert mock_client.get.call_count == 1

    async def test_429(self, source, mock_client):
        """❌ 429 → rate limit ProviderError."""
        mock_client.get.return_value = status_error(429)

        with pytest.raises(ProviderError, match="rate limit"):
            await source.get_quote("PETR4")

    async def test_malformed_json(self, source, mock_client):
        """❌ Invalid JSON → ProviderError."""
        resp = MagicMock()
        resp.json.side_effect = ValueError("Expecting value")
        mock_client.get.return_value = resp

        with pytest.raises(ProviderError, match="malformed"):
            await source.get_quote("PETR4")

    async def test_transport_error(self, source, mock_client):
        """❌ Non-retried transport error → ProviderError."""
        mock_client.get.side_effect = httpx.ReadError("connection reset")

        with pytest.raises(ProviderError, match="connection error"):
            await source.get_quote("PETR4")

    async def test_close(self, source, mock_client):
        """✅ close() closes the HTTP client."""
        await source.close()
        mock_client.aclose.assert_awaited_once()
