"""Upstream market data providers for exchange rates and stock quotes.

Each domain has one small ABC and one adapter per upstream API:

- ExchangeRateApiProvider, FixerProvider: latest exchange rates
- AlphaVantageProvider, YFinanceProvider: stock quotes and symbol search

Adapters raise on any failure (missing key, HTTP error, rate limit, malformed
payload); ProviderChain turns those into recorded failures and moves on.

Example:
    chain = ProviderChain("currency", [ExchangeRateApiProvider(), FixerProvider()])
    resolution = await chain.resolve(lambda p: p.get_latest_rates("USD"))
    print(resolution.provider, resolution.value.rates["EUR"])
"""
from market_alerts.providers.core import ProviderABC, ProviderChain, Resolution
from market_alerts.providers.currency import (CurrencyProviderABC,
                                              ExchangeRateApiProvider,
                                              FixerProvider)
from market_alerts.providers.stocks import (AlphaVantageProvider,
                                            StocksProviderABC,
                                            YFinanceProvider)

__all__ = [
    "AlphaVantageProvider",
    "CurrencyProviderABC",
    "ExchangeRateApiProvider",
    "FixerProvider",
    "ProviderABC",
    "ProviderChain",
    "Resolution",
    "StocksProviderABC",
    "YFinanceProvider",
]
