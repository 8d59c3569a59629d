"""Yahoo Finance market data provider for stocks."""
import asyncio
from decimal import Decimal

import yfinance as yf

from market_alerts.providers.stocks.stocks_provider_abc import StocksProviderABC
from market_alerts.providers.stocks.yfinance.models import YFinanceSnapshot
from market_alerts.schemas import StockQuote, SymbolMatch
from market_alerts.utils import to_decimal, utcnow

SEARCH_LIMIT = 10


class YFinanceProvider(StocksProviderABC):
    """Market data provider for stocks via Yahoo Finance.

    Uses yfinance library for stock quotes and symbol search. No API key
    required. yfinance is blocking, so every call runs in a worker thread.
    """

    name = "yfinance"

    def _extract_snapshot(self, ticker: yf.Ticker, symbol: str) -> YFinanceSnapshot:
        """Extract price fields from ticker; raises if price unavailable."""
        info = getattr(ticker, "fast_info", None)
        if info and (price := info.get("lastPrice") or info.get("regularMarketPrice")):
            return YFinanceSnapshot(
                price=price,
                open=info.get("open"),
                high=info.get("dayHigh"),
                low=info.get("dayLow"),
                volume=info.get("lastVolume"),
                previous_close=info.get("previousClose"),
            )
        full = ticker.info
        price = full.get("currentPrice") or full.get("regularMarketPrice")
        if price is None:
            raise ValueError(f"Stock '{symbol}' not found or has no price data")
        return YFinanceSnapshot(
            price=price,
            open=full.get("open"),
            high=full.get("dayHigh"),
            low=full.get("dayLow"),
            volume=full.get("volume"),
            previous_close=full.get("previousClose"),
            company_name=full.get("shortName") or full.get("longName"),
        )

    def _fetch_quote_sync(self, symbol: str) -> StockQuote:
        """Fetch a single quote synchronously (run in thread)."""
        ticker = yf.Ticker(symbol)
        try:
            snap = self._extract_snapshot(ticker, symbol)
        except (AttributeError, LookupError, TypeError) as e:
            raise ValueError(f"Failed to fetch quote for '{symbol}': {e}") from e
        return self._build_quote(symbol, snap)

    def _build_quote(self, symbol: str, snap: YFinanceSnapshot) -> StockQuote:
        price = to_decimal(snap.price)
        previous_close = (
            to_decimal(snap.previous_close) if snap.previous_close else None
        )
        change = price - previous_close if previous_close else Decimal("0")
        change_percent = (
            change / previous_close * 100 if previous_close else Decimal("0")
        )
        return StockQuote(
            symbol=symbol,
            price=price,
            open=to_decimal(snap.open) if snap.open is not None else price,
            high=to_decimal(snap.high) if snap.high is not None else price,
            low=to_decimal(snap.low) if snap.low is not None else price,
            volume=int(snap.volume or 0),
            change=change.quantize(Decimal("0.0001")),
            change_percent=change_percent.quantize(Decimal("0.0001")),
            previous_close=previous_close,
            latest_trading_day=utcnow().date().isoformat(),
            company_name=snap.company_name,
            source=self.name,
        )

    async def get_quote(self, symbol: str) -> StockQuote:
        """Fetch the current quote for a stock symbol."""
        return await asyncio.to_thread(self._fetch_quote_sync, symbol)

    def _search_sync(self, query: str) -> list[SymbolMatch]:
        results = yf.Search(query, max_results=SEARCH_LIMIT).quotes
        return [
            SymbolMatch(
                symbol=item["symbol"],
                name=item.get("shortname") or item.get("longname") or item["symbol"],
                type=item.get("quoteType"),
                region=item.get("exchDisp") or item.get("exchange"),
            )
            for item in results
            if item.get("symbol")
        ]

    async def search(self, query: str) -> list[SymbolMatch]:
        """Search symbols via Yahoo Finance search."""
        return await asyncio.to_thread(self._search_sync, query)
