"""Core provider abstractions."""
from market_alerts.providers.core.chain import ProviderChain, Resolution
from market_alerts.providers.core.error_mapper import ErrorMapper
from market_alerts.providers.core.provider_abc import ProviderABC
from market_alerts.providers.core.utils import (normalize_currency_code,
                                                normalize_stock_symbol, round2,
                                                round5)

__all__ = [
    "ErrorMapper",
    "ProviderABC",
    "ProviderChain",
    "Resolution",
    "normalize_currency_code",
    "normalize_stock_symbol",
    "round2",
    "round5",
]
