"""Abstract base class for exchange-rate providers."""
from abc import abstractmethod

from market_alerts.providers.core import ProviderABC
from market_alerts.schemas import RatesSnapshot


class CurrencyProviderABC(ProviderABC):
    """Base interface for exchange-rate providers.

    Subclasses implement this to provide the latest rates for a base currency
    from one upstream API.
    """

    @abstractmethod
    async def get_latest_rates(self, base: str) -> RatesSnapshot:
        """Fetch the latest rates for a base currency.

        Args:
            base: Normalized ISO 4217 code (e.g. "USD").

        Returns:
            A RatesSnapshot mapping target codes to rates (1 base = rate target).
        """
