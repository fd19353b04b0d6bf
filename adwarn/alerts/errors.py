"""Alerting error types."""


class AlertingError(Exception):
    """Base exception for alerting errors."""
    pass


class SourceFetchError(AlertingError):
    """Error reaching the aerodrome status source (network, HTTP status, credentials)."""

    def __init__(self, message: str, icao: str = None, status_code: int = None):
        super().__init__(message)
        self.icao = icao
        self.status_code = status_code


class StoreError(AlertingError):
    """Error reading from or writing to the alert store."""
    pass
