"""Abstract base class for stock market data providers."""
from abc import abstractmethod

from market_alerts.providers.core import ProviderABC
from market_alerts.schemas import StockQuote, SymbolMatch


class StocksProviderABC(ProviderABC):
    """Base interface for stock market data providers.

    Subclasses implement this to provide quotes (and optionally symbol search)
    from one stock exchange API.
    """

    @abstractmethod
    async def get_quote(self, symbol: str) -> StockQuote:
        """Fetch the current quote for a symbol.

        Args:
            symbol: Normalized ticker (e.g. "AAPL", "^GSPC").

        Returns:
            A StockQuote for that symbol.
        """

    async def search(self, query: str) -> list[SymbolMatch]:
        """Search symbols by keyword.

        Default implementation raises NotImplementedError, which the chain
        treats as this provider being unavailable for search.
        """
        raise NotImplementedError("Symbol search is not supported by this provider")
