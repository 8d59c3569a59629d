"""Exchange-rate providers."""
from market_alerts.providers.currency.currency_provider_abc import \
    CurrencyProviderABC
from market_alerts.providers.currency.exchangerate_api import \
    ExchangeRateApiProvider
from market_alerts.providers.currency.fixer import FixerProvider

__all__ = ["CurrencyProviderABC", "ExchangeRateApiProvider", "FixerProvider"]
