"""Stock quotes, symbol search, trending symbols, and headline indices."""
import asyncio
import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from market_alerts.cache import TTLCache
from market_alerts.db import PriceStore, StockPriceRecord
from market_alerts.errors import (DataUnavailable, InvalidDateRange,
                                  InvalidSymbol, MarketAlertsError)
from market_alerts.providers.core import ProviderChain, normalize_stock_symbol
from market_alerts.providers.stocks import StocksProviderABC
from market_alerts.schemas import MarketIndices, StockQuote, SymbolMatch
from market_alerts.services.market_data_service import (FALLBACK_WINDOW,
                                                        BatchReport,
                                                        MarketDataService)
from market_alerts.utils import utcnow

logger = logging.getLogger(__name__)

QUOTE_CACHE_TTL_SECONDS = 300
SEARCH_CACHE_TTL_SECONDS = 1800
SEARCH_LIMIT = 10
MIN_QUERY_LENGTH = 2
MAX_HISTORY_POINTS = 365

TRENDING_SYMBOLS = ("AAPL", "GOOGL", "MSFT", "AMZN", "TSLA", "META", "NVDA", "NFLX")
TRENDING_LIMIT = 5

# Attribute on MarketIndices -> index ticker
MARKET_INDICES = {
    "sp500": "^GSPC",
    "dow_jones": "^DJI",
    "nasdaq": "^IXIC",
}


def _quote_validator(symbol: str):
    def validate(quote: StockQuote) -> None:
        if quote.symbol.upper() != symbol:
            raise ValueError(f"Quote is for {quote.symbol}, expected {symbol}")
        if quote.price <= 0:
            raise ValueError(f"Non-positive price for {symbol}")

    return validate


def _validate_matches(matches: list[SymbolMatch]) -> None:
    if not isinstance(matches, list):
        raise ValueError("Search response is not a list")


class StockService(MarketDataService[StocksProviderABC, StockQuote]):
    """Stock quotes through the stock provider chain.

    Quotes are cached for five minutes and appended to the price history on
    every provider fetch. Search results are cached for thirty minutes and
    have no stored fallback.
    """

    def __init__(
        self,
        chain: ProviderChain[StocksProviderABC],
        cache: TTLCache,
        store: PriceStore,
        *,
        cache_ttl_seconds: float = QUOTE_CACHE_TTL_SECONDS,
        search_ttl_seconds: float = SEARCH_CACHE_TTL_SECONDS,
        fallback_window: timedelta = FALLBACK_WINDOW,
    ) -> None:
        super().__init__(
            chain,
            cache,
            cache_ttl_seconds=cache_ttl_seconds,
            fallback_window=fallback_window,
        )
        self._store = store
        self._search_ttl = search_ttl_seconds

    def _persist(self, quote: StockQuote) -> StockPriceRecord:
        record = quote.to_record()
        record.observed_at = utcnow()
        return self._store.append(record)

    def _stored_quote(self, symbol: str, since: datetime) -> StockQuote | None:
        record = self._store.latest(symbol, since)
        return StockQuote.from_record(record) if record else None

    async def get_quote(self, symbol: str) -> StockQuote:
        """Current quote for symbol (cache, providers, then stored history)."""
        symbol = normalize_stock_symbol(symbol)
        return await self._get_value(
            f"quote:{symbol}",
            fetch=lambda provider: provider.get_quote(symbol),
            validate=_quote_validator(symbol),
            persist=self._persist,
            fallback=lambda since: self._stored_quote(symbol, since),
        )

    async def historical_prices(
        self, symbol: str, limit: int = 30
    ) -> list[StockPriceRecord]:
        """The limit most recent stored observations for symbol, newest first."""
        symbol = normalize_stock_symbol(symbol)
        if not 1 <= limit <= MAX_HISTORY_POINTS:
            raise InvalidDateRange(f"Limit must be between 1 and {MAX_HISTORY_POINTS}")
        return await asyncio.to_thread(self._store.history, symbol, limit)

    async def search(self, query: str) -> list[SymbolMatch]:
        """Symbol search by keyword; at most ten matches."""
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise InvalidSymbol(
                f"Search query must be at least {MIN_QUERY_LENGTH} characters"
            )
        cache_key = f"search:{query.upper()}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached
        resolution = await self._chain.resolve(
            lambda provider: provider.search(query),
            validate=_validate_matches,
            label=cache_key,
        )
        matches = resolution.value[:SEARCH_LIMIT]
        self._cache.set(cache_key, matches, self._search_ttl)
        return matches

    async def _quote_many(
        self, symbols: list[str]
    ) -> list[StockQuote | MarketAlertsError]:
        """Quote symbols concurrently; domain errors are returned in place."""
        results = await asyncio.gather(
            *(self.get_quote(s) for s in symbols), return_exceptions=True
        )
        for symbol, result in zip(symbols, results):
            if isinstance(result, BaseException) and not isinstance(
                result, MarketAlertsError
            ):
                raise result
            if isinstance(result, MarketAlertsError):
                logger.warning("Failed to fetch quote for %s: %s", symbol, result)
        return results

    async def trending(self) -> list[StockQuote]:
        """Quotes for the first five trending symbols that resolve."""
        results = await self._quote_many(list(TRENDING_SYMBOLS))
        quotes = [r for r in results if isinstance(r, StockQuote)]
        return quotes[:TRENDING_LIMIT]

    async def market_indices(self) -> MarketIndices:
        """S&P 500, Dow Jones, and NASDAQ; a failed index is left null.

        Raises:
            DataUnavailable: If no index could be quoted.
        """
        names = list(MARKET_INDICES)
        results = await self._quote_many([MARKET_INDICES[n] for n in names])
        found = {
            name: result
            for name, result in zip(names, results)
            if isinstance(result, StockQuote)
        }
        if not found:
            raise DataUnavailable("Market indices are currently unavailable")
        return MarketIndices(**found)

    async def refresh_watchlist(self) -> BatchReport:
        """Re-fetch trending symbols past the cache; failures are isolated."""
        report = BatchReport()
        for symbol in TRENDING_SYMBOLS:
            self._cache.delete(f"quote:{symbol}")
            try:
                await self.get_quote(symbol)
            except (MarketAlertsError, SQLAlchemyError) as e:
                logger.warning("Failed to refresh quote for %s: %s", symbol, e)
                report.failed[symbol] = str(e)
            else:
                report.succeeded.append(symbol)
        logger.info(
            "Refreshed stock watchlist: %d ok, %d failed",
            len(report.succeeded), len(report.failed),
        )
        return report

    async def purge_old_records(self, retention_days: int = 30) -> int:
        cutoff = utcnow() - timedelta(days=retention_days)
        deleted = await asyncio.to_thread(self._store.delete_older_than, cutoff)
        logger.info("Deleted %d stock price records older than %d days", deleted, retention_days)
        return deleted
