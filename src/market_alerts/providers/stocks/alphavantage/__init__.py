"""Alpha Vantage provider."""
from market_alerts.providers.stocks.alphavantage.alpha_vantage_provider import \
    AlphaVantageProvider

__all__ = ["AlphaVantageProvider"]
