"""Stock market data providers."""
from market_alerts.providers.stocks.alphavantage import AlphaVantageProvider
from market_alerts.providers.stocks.stocks_provider_abc import StocksProviderABC
from market_alerts.providers.stocks.yfinance import YFinanceProvider

__all__ = ["AlphaVantageProvider", "StocksProviderABC", "YFinanceProvider"]
