"""Fixer exchange-rate provider."""
import os

import httpx

from market_alerts.errors import ProviderUnavailable
from market_alerts.providers.currency.currency_provider_abc import \
    CurrencyProviderABC
from market_alerts.providers.currency.fixer.models import (FixerLatest,
                                                           FixerLatestParams)
from market_alerts.schemas import RatesSnapshot
from market_alerts.utils import parse_timestamp


class FixerProvider(CurrencyProviderABC):
    """Exchange rates via https://fixer.io (API key required).

    Fixer answers HTTP 200 with success=false on errors, so the body is
    checked as well as the status.
    """

    name = "fixer"
    BASE_URL = "https://data.fixer.io/api"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key or os.getenv("FIXER_API_KEY")
        self._client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def get_latest_rates(self, base: str) -> RatesSnapshot:
        """Fetch the latest rates for base."""
        if not self._api_key:
            raise ProviderUnavailable(self.name, "FIXER_API_KEY not configured")

        params = FixerLatestParams(access_key=self._api_key, base=base).model_dump()
        response = await self._client.get("/latest", params=params)
        response.raise_for_status()
        payload = FixerLatest.model_validate(response.json())

        if not payload.success:
            reason = payload.error.type if payload.error else "success=false"
            raise ProviderUnavailable(self.name, f"API error: {reason}")
        if not payload.rates:
            raise ValueError("Invalid response from Fixer: missing rates")

        return RatesSnapshot(
            base=(payload.base or base).upper(),
            rates=payload.rates,
            timestamp=parse_timestamp(payload.timestamp),
            source=self.name,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
