"""Fixer provider."""
from market_alerts.providers.currency.fixer.fixer_provider import FixerProvider

__all__ = ["FixerProvider"]
