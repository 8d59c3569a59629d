"""ExchangeRate-API (v6) exchange-rate provider."""
import os

import httpx

from market_alerts.errors import ProviderUnavailable
from market_alerts.providers.currency.currency_provider_abc import \
    CurrencyProviderABC
from market_alerts.providers.currency.exchangerate_api.models import \
    ExchangeRateApiLatest
from market_alerts.schemas import RatesSnapshot
from market_alerts.utils import parse_timestamp


class ExchangeRateApiProvider(CurrencyProviderABC):
    """Exchange rates via https://www.exchangerate-api.com (API key required).

    The key is part of the URL path, so it is never logged.
    """

    name = "exchangerate-api"
    BASE_URL = "https://v6.exchangerate-api.com/v6"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the ExchangeRate-API provider.

        Args:
            api_key: API key. Defaults to EXCHANGE_RATE_API_KEY env var.
            timeout: HTTP timeout in seconds.
            client: Optional pre-built client (tests).
        """
        self._api_key = api_key or os.getenv("EXCHANGE_RATE_API_KEY")
        self._client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def get_latest_rates(self, base: str) -> RatesSnapshot:
        """Fetch the latest conversion rates for base."""
        if not self._api_key:
            raise ProviderUnavailable(self.name, "EXCHANGE_RATE_API_KEY not configured")

        response = await self._client.get(f"/{self._api_key}/latest/{base}")
        response.raise_for_status()
        payload = ExchangeRateApiLatest.model_validate(response.json())

        if payload.result not in (None, "success"):
            raise ProviderUnavailable(
                self.name, f"API error: {payload.error_type or payload.result}"
            )
        if not payload.conversion_rates:
            raise ValueError("Invalid response from ExchangeRate-API: missing conversion_rates")

        return RatesSnapshot(
            base=(payload.base_code or base).upper(),
            rates=payload.conversion_rates,
            timestamp=parse_timestamp(payload.time_last_update_unix),
            source=self.name,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
