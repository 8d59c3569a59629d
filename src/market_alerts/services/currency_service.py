"""Exchange rates: latest, specific pair, conversion, history, and scheduled upkeep."""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from market_alerts.cache import TTLCache
from market_alerts.db import RateRecord, RateStore
from market_alerts.errors import (DataUnavailable, InvalidAmount,
                                  InvalidDateRange, MarketAlertsError)
from market_alerts.providers.core import (ProviderChain,
                                          normalize_currency_code)
from market_alerts.providers.currency import CurrencyProviderABC
from market_alerts.schemas import CurrencyHealth, RatesSnapshot
from market_alerts.services.market_data_service import (FALLBACK_WINDOW,
                                                        BatchReport,
                                                        MarketDataService)
from market_alerts.utils import utcnow

logger = logging.getLogger(__name__)

RATES_CACHE_TTL_SECONDS = 3600
MAX_HISTORY_DAYS = 365
USD = "USD"

MAJOR_CURRENCIES = ("USD", "EUR", "GBP", "JPY")

SUPPORTED_CURRENCIES = (
    "USD", "EUR", "GBP", "JPY", "AUD", "CAD", "CHF", "CNY", "SEK", "NZD",
    "MXN", "SGD", "HKD", "NOK", "TRY", "RUB", "INR", "BRL", "ZAR", "KRW",
)


@dataclass(frozen=True)
class Conversion:
    from_currency: str
    to_currency: str
    amount: Decimal
    converted: Decimal
    rate: Decimal
    timestamp: datetime


def _validate_snapshot(snapshot: RatesSnapshot) -> None:
    if not snapshot.rates:
        raise ValueError("Response contains no rates")
    bad = [code for code, rate in snapshot.rates.items() if rate <= 0]
    if bad:
        raise ValueError(f"Non-positive rates for {', '.join(sorted(bad))}")


class CurrencyService(MarketDataService[CurrencyProviderABC, RatesSnapshot]):
    """Exchange rates through the currency provider chain.

    Latest rates are cached per base currency for an hour and appended to the
    rate history on every provider fetch.
    """

    def __init__(
        self,
        chain: ProviderChain[CurrencyProviderABC],
        cache: TTLCache,
        store: RateStore,
        *,
        cache_ttl_seconds: float = RATES_CACHE_TTL_SECONDS,
        fallback_window: timedelta = FALLBACK_WINDOW,
    ) -> None:
        super().__init__(
            chain,
            cache,
            cache_ttl_seconds=cache_ttl_seconds,
            fallback_window=fallback_window,
        )
        self._store = store

    @staticmethod
    def _cache_key(base: str) -> str:
        return f"rates:{base}"

    def _persist(self, snapshot: RatesSnapshot) -> int:
        return self._store.append_rates(snapshot.base, snapshot.rates, snapshot.source)

    def _stored_snapshot(self, base: str, since: datetime) -> RatesSnapshot | None:
        """Newest stored rate per target for base observed after since."""
        records = self._store.recent_rates(base, since)
        if not records:
            return None
        rates: dict[str, Decimal] = {}
        for record in records:
            rates.setdefault(record.target_currency, record.rate)
        return RatesSnapshot(
            base=base,
            rates=rates,
            timestamp=records[0].observed_at,
            source="store",
        )

    async def get_latest_rates(self, base: str = USD) -> RatesSnapshot:
        """Latest rates for base (cache, providers, then stored history)."""
        base = normalize_currency_code(base)
        return await self._get_value(
            self._cache_key(base),
            fetch=lambda provider: provider.get_latest_rates(base),
            validate=_validate_snapshot,
            persist=self._persist,
            fallback=lambda since: self._stored_snapshot(base, since),
        )

    async def get_specific_rate(self, base: str, target: str) -> Decimal:
        """Rate for one currency pair; 1 when base and target are equal."""
        base = normalize_currency_code(base)
        target = normalize_currency_code(target)
        if base == target:
            return Decimal("1")
        snapshot = await self.get_latest_rates(base)
        rate = snapshot.rates.get(target)
        if rate is None:
            raise DataUnavailable(f"Exchange rate not found for {base}/{target}")
        return rate

    async def get_rate_against_usd(self, code: str) -> Decimal:
        """How many USD one unit of code buys (the alert value for CURRENCY alerts)."""
        return await self.get_specific_rate(code, USD)

    async def convert(self, from_currency: str, to_currency: str, amount: Decimal) -> Conversion:
        """Convert amount between currencies at the latest rate.

        Raises:
            InvalidAmount: If amount is not positive.
        """
        if amount <= 0:
            raise InvalidAmount("Amount must be greater than 0")
        from_currency = normalize_currency_code(from_currency)
        to_currency = normalize_currency_code(to_currency)
        rate = await self.get_specific_rate(from_currency, to_currency)
        return Conversion(
            from_currency=from_currency,
            to_currency=to_currency,
            amount=amount,
            converted=amount * rate,
            rate=rate,
            timestamp=utcnow(),
        )

    async def historical_rates(
        self, base: str, target: str, days: int = 30
    ) -> list[RateRecord]:
        """Stored observations for a pair within the last days, newest first."""
        base = normalize_currency_code(base)
        target = normalize_currency_code(target)
        if not 1 <= days <= MAX_HISTORY_DAYS:
            raise InvalidDateRange(f"Days must be between 1 and {MAX_HISTORY_DAYS}")
        since = utcnow() - timedelta(days=days)
        return await asyncio.to_thread(self._store.history, base, target, since)

    async def supported_currencies(self) -> list[str]:
        """Codes seen in the last day, or the built-in list when history is empty."""
        since = utcnow() - timedelta(hours=24)
        seen = await asyncio.to_thread(self._store.targets_seen_since, since)
        return seen or list(SUPPORTED_CURRENCIES)

    async def refresh_major_rates(self) -> BatchReport:
        """Fetch major bases past the cache so history stays populated."""
        report = BatchReport()
        for base in MAJOR_CURRENCIES:
            self._cache.delete(self._cache_key(base))
            try:
                await self.get_latest_rates(base)
            except (MarketAlertsError, SQLAlchemyError) as e:
                logger.warning("Failed to refresh rates for %s: %s", base, e)
                report.failed[base] = str(e)
            else:
                report.succeeded.append(base)
        logger.info(
            "Refreshed exchange rates: %d ok, %d failed",
            len(report.succeeded), len(report.failed),
        )
        return report

    async def purge_old_records(self, retention_days: int = 30) -> int:
        """Delete rate history older than retention_days. Returns the count."""
        cutoff = utcnow() - timedelta(days=retention_days)
        deleted = await asyncio.to_thread(self._store.delete_older_than, cutoff)
        logger.info("Deleted %d rate records older than %d days", deleted, retention_days)
        return deleted

    async def health_check(self) -> CurrencyHealth:
        try:
            last_update = await asyncio.to_thread(self._store.last_observed_at)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Currency health check failed: %s", e)
            return CurrencyHealth(status="unhealthy", cache_status="unknown")
        return CurrencyHealth(
            status="healthy",
            last_update=last_update,
            cache_status="connected",
        )
