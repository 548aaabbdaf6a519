"""Error taxonomy shared across the monitor, store and user actions."""


class QuoteUnavailable(Exception):
    """No quote could be obtained from any source this cycle."""

    def __init__(self, symbol: str, reason: str = ""):
        self.symbol = symbol
        self.reason = reason
        message = f"No quote available for {symbol}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StoreError(Exception):
    """Exception raised when a persistence operation fails."""
    pass


class AlertNotFound(StoreError):
    """Raised when an alert id does not exist in the store."""

    def __init__(self, alert_id: str):
        self.alert_id = alert_id
        super().__init__(f"Alert {alert_id} not found")


class MonitorStateError(Exception):
    """Raised on an invalid monitor lifecycle transition."""
    pass


class AlertValidationError(ValueError):
    """Raised when user input for an alert is invalid."""
    pass
