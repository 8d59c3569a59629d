"""Alpha Vantage market data provider for stocks."""
import os
from typing import Any

import httpx

from market_alerts.errors import ProviderUnavailable
from market_alerts.providers.stocks.alphavantage.models import (
    AlphaVantageGlobalQuote, AlphaVantageMatch, AlphaVantageQueryParams)
from market_alerts.providers.stocks.stocks_provider_abc import StocksProviderABC
from market_alerts.schemas import StockQuote, SymbolMatch
from market_alerts.utils import to_decimal

SEARCH_LIMIT = 10


class AlphaVantageProvider(StocksProviderABC):
    """Market data provider for stocks via https://www.alphavantage.co.

    Requires an API key. The free tier answers HTTP 200 with a "Note" or
    "Information" body when rate limited; that is reported as a failure.
    """

    name = "alpha-vantage"
    BASE_URL = "https://www.alphavantage.co"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Alpha Vantage provider.

        Args:
            api_key: API key. Defaults to ALPHA_VANTAGE_API_KEY env var.
            timeout: HTTP timeout in seconds.
            client: Optional pre-built client (tests).
        """
        self._api_key = api_key or os.getenv("ALPHA_VANTAGE_API_KEY")
        self._client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def _query(self, function: str, **params: str) -> dict[str, Any]:
        if not self._api_key:
            raise ProviderUnavailable(self.name, "ALPHA_VANTAGE_API_KEY not configured")
        query = AlphaVantageQueryParams(function=function, apikey=self._api_key).model_dump()
        response = await self._client.get("/query", params=query | params)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Invalid response from Alpha Vantage")
        for key in ("Note", "Information"):
            if key in data:
                raise ProviderUnavailable(self.name, f"API rate limit exceeded: {data[key]}")
        if "Error Message" in data:
            raise ProviderUnavailable(self.name, data["Error Message"])
        return data

    async def get_quote(self, symbol: str) -> StockQuote:
        """Fetch the current quote via GLOBAL_QUOTE."""
        data = await self._query("GLOBAL_QUOTE", symbol=symbol)
        raw = data.get("Global Quote")
        if not raw:
            raise ValueError(f"No data found for symbol: {symbol}")
        quote = AlphaVantageGlobalQuote.model_validate(raw)
        return StockQuote(
            symbol=quote.symbol.upper(),
            price=to_decimal(quote.price),
            open=to_decimal(quote.open),
            high=to_decimal(quote.high),
            low=to_decimal(quote.low),
            volume=int(to_decimal(quote.volume)),
            change=to_decimal(quote.change),
            change_percent=to_decimal(quote.change_percent),
            previous_close=(
                to_decimal(quote.previous_close) if quote.previous_close else None
            ),
            latest_trading_day=quote.latest_trading_day,
            source=self.name,
        )

    async def search(self, query: str) -> list[SymbolMatch]:
        """Search symbols via SYMBOL_SEARCH (top 10 matches)."""
        data = await self._query("SYMBOL_SEARCH", keywords=query)
        matches = [
            AlphaVantageMatch.model_validate(m)
            for m in data.get("bestMatches", [])[:SEARCH_LIMIT]
        ]
        return [
            SymbolMatch(
                symbol=m.symbol,
                name=m.name,
                type=m.type,
                region=m.region,
                market_open=m.market_open,
                market_close=m.market_close,
                timezone=m.timezone,
                currency=m.currency,
                match_score=float(m.match_score) if m.match_score else None,
            )
            for m in matches
        ]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
