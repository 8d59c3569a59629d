"""Maps domain exceptions to HTTP responses."""
from dataclasses import dataclass

from market_alerts.errors import (AlertAlreadyTriggered, AllProvidersFailed,
                                  DataUnavailable, InvalidInput,
                                  MarketAlertsError, NotFound,
                                  NotificationFailed, PersistenceWriteFailed,
                                  ProviderUnavailable)

_STATUS_BY_TYPE: tuple[tuple[type[MarketAlertsError], int], ...] = (
    (InvalidInput, 400),
    (NotFound, 404),
    (AlertAlreadyTriggered, 409),
    (DataUnavailable, 503),
    (AllProvidersFailed, 502),
    (ProviderUnavailable, 502),
    (NotificationFailed, 502),
    (PersistenceWriteFailed, 500),
)


@dataclass(frozen=True)
class ErrorMapper:
    """Maps domain exceptions to HTTP (status_code, code, message).

    Registered once as the app's exception handler so routers and services
    raise typed errors and never build HTTP responses themselves.
    """

    api_name: str = "Market data API"

    def to_http(self, exc: Exception) -> tuple[int, str, str]:
        """Map an exception to (status_code, error code, message).

        Args:
            exc: The exception raised by a service or store.

        Returns:
            (status_code, code, message) for the error envelope.
        """
        if isinstance(exc, MarketAlertsError):
            for error_type, status in _STATUS_BY_TYPE:
                if isinstance(exc, error_type):
                    return (status, exc.code, self._message(exc, status))
            return (500, exc.code, "Internal server error")
        return (500, "internal_error", "Internal server error")

    def _message(self, exc: MarketAlertsError, status: int) -> str:
        if isinstance(exc, (AllProvidersFailed, ProviderUnavailable)):
            return f"{self.api_name} error"
        if status >= 500 and not isinstance(exc, DataUnavailable):
            return "Internal server error"
        return str(exc) or exc.code.replace("_", " ")
