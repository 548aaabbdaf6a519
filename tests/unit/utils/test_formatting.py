"""Unit tests for Formatting Utils.

This module tests message formatting functions for alert notifications.
"""
import pytest

from pricealert.services.alert_store import AlertDirection, AlertHistoryRecord
from pricealert.utils.formatting import (
    format_price,
    format_alert_title,
    format_alert_message,
    format_timestamp_ms,
    format_history
)


# ============================================================================
# Tests for alert formatting
# ============================================================================

@pytest.mark.unit
class TestFormatAlert:
    """Test title and message formatting."""

    def test_price(self):
        """✅ Two decimals with currency prefix."""
        assert format_price(35.5) == "R$ 35.50"
        assert format_price(2.849) == "R$ 2.85"

    def test_title_above(self):
        """✅ ABOVE title with rocket icon."""
        assert format_alert_title("PETR4", AlertDirection.ABOVE) == "🚀 Price Alert (above) - PETR4"

    def test_title_below_string(self):
        """✅ BELOW title from a plain string direction."""
        assert format_alert_title("VALE3", "BELOW") == "📉 Price Alert (below) - VALE3"

    def test_message_above(self):
        """✅ ABOVE message wording."""
        message = format_alert_message("PETR4", AlertDirection.ABOVE, 35.5, 35.0)
        assert message == "PETR4 reached R$ 35.50 (target: R$ 35.00)"

    def test_message_below(self):
        """✅ BELOW message wording."""
        message = format_alert_message("VALE3", AlertDirection.BELOW, 60.0, 61.0)
        assert message == "VALE3 dropped to R$ 60.00 (target: R$ 61.00)"

    def test_timestamp(self):
        """✅ Epoch millis rendered in UTC."""
        assert format_timestamp_ms(0) == "1970-01-01 00:00 UTC"


# ============================================================================
# Tests for format_history
# ============================================================================

@pytest.mark.unit
class TestFormatHistory:
    """Test format_history function."""

    def test_empty(self):
        """✅ Empty history."""
        assert format_history([]) == "No alerts triggered yet."

    def test_with_records(self):
        """✅ One line per record, capped at 10."""
        records = [
            AlertHistoryRecord(
                alert_id=f"a{i}",
                symbol="PETR4",
                target_price=35.0,
                actual_price=35.5,
                direction=AlertDirection.ABOVE,
                triggered_at=0,
                user_id="u"
            )
            for i in range(12)
        ]

        output = format_history(records)

        assert output.startswith("📜 Recent Alerts:")
        assert output.count("🚀 PETR4 | R$ 35.50 (target R$ 35.00)") == 10
