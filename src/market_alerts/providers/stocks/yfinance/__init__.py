"""Yahoo Finance provider."""
from market_alerts.providers.stocks.yfinance.y_finance_provider import \
    YFinanceProvider

__all__ = ["YFinanceProvider"]
