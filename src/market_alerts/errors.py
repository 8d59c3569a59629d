"""Error taxonomy for market data, alerts, and budgets.

Provider-level failures stay inside the provider chain; everything a caller can
see derives from MarketAlertsError so routers can map it in one place.
"""


class MarketAlertsError(Exception):
    """Base class for all domain errors."""

    code = "internal_error"


class ProviderUnavailable(MarketAlertsError):
    """A single upstream provider failed (credentials, timeout, rate limit, bad payload)."""

    code = "provider_unavailable"

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


class AllProvidersFailed(MarketAlertsError):
    """Every provider in a chain failed for one query."""

    code = "all_providers_failed"

    def __init__(self, domain: str, failures: list[ProviderUnavailable]) -> None:
        last = failures[-1] if failures else None
        detail = str(last) if last else "no providers configured"
        super().__init__(f"All {domain} providers failed (last error: {detail})")
        self.domain = domain
        self.failures = failures
        self.last_error = last


class DataUnavailable(MarketAlertsError):
    """No provider answered and no usable stored record exists."""

    code = "data_unavailable"


class InvalidInput(MarketAlertsError):
    """Client supplied an invalid value; never retried."""

    code = "invalid_input"


class InvalidAmount(InvalidInput):
    code = "invalid_amount"


class InvalidCurrencyCode(InvalidInput):
    code = "invalid_currency_code"


class InvalidDateRange(InvalidInput):
    code = "invalid_date_range"


class InvalidSymbol(InvalidInput):
    code = "invalid_symbol"


class NotFound(MarketAlertsError):
    """Owner-scoped lookup miss (alert, budget)."""

    code = "not_found"


class AlertAlreadyTriggered(MarketAlertsError):
    """A triggered alert is terminal and cannot be re-armed."""

    code = "alert_already_triggered"


class PersistenceWriteFailed(MarketAlertsError):
    code = "persistence_write_failed"


class NotificationFailed(MarketAlertsError):
    code = "notification_failed"
