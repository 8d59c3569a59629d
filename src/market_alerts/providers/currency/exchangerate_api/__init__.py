"""ExchangeRate-API provider."""
from market_alerts.providers.currency.exchangerate_api.exchange_rate_api_provider import \
    ExchangeRateApiProvider

__all__ = ["ExchangeRateApiProvider"]
