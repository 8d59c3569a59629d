"""Currency service tests: cache, fallback, persistence, and conversion."""
from datetime import timedelta
from decimal import Decimal

import pytest
from fakes import FakeRateProvider
from sqlalchemy.exc import OperationalError

from market_alerts.cache import TTLCache
from market_alerts.errors import (DataUnavailable, InvalidAmount,
                                  InvalidCurrencyCode, InvalidDateRange,
                                  ProviderUnavailable)
from market_alerts.providers.core import ProviderChain
from market_alerts.services import CurrencyService
from market_alerts.services.currency_service import SUPPORTED_CURRENCIES
from market_alerts.utils import utcnow


def _failing_service(cache, rate_store) -> CurrencyService:
    chain = ProviderChain(
        "currency",
        [
            FakeRateProvider("a", error=ProviderUnavailable("a", "down")),
            FakeRateProvider("b", error=ValueError("garbage")),
        ],
    )
    return CurrencyService(chain, cache, rate_store)


@pytest.mark.asyncio
async def test_cache_miss_calls_chain_once_then_hits(currency_service, rate_provider):
    first = await currency_service.get_latest_rates("usd")
    second = await currency_service.get_latest_rates("USD")

    assert first.rates["EUR"] == Decimal("0.92")
    assert second is first
    assert rate_provider.calls == ["USD"]


@pytest.mark.asyncio
async def test_resolved_rates_are_persisted_in_background(currency_service, rate_store):
    await currency_service.get_latest_rates("USD")
    await currency_service.drain_pending_writes()

    history = rate_store.history("USD", "EUR", utcnow() - timedelta(minutes=5))
    assert [r.rate for r in history] == [Decimal("0.92")]
    assert history[0].source == "fake-rates"


@pytest.mark.asyncio
async def test_all_providers_down_serves_fresh_stored_rates(cache, rate_store):
    rate_store.append_rates("USD", {"EUR": Decimal("0.90")}, "a", observed_at=utcnow() - timedelta(hours=3))
    rate_store.append_rates("USD", {"EUR": Decimal("0.91")}, "a", observed_at=utcnow() - timedelta(hours=1))
    service = _failing_service(cache, rate_store)

    snapshot = await service.get_latest_rates("USD")

    assert snapshot.source == "store"
    assert snapshot.rates == {"EUR": Decimal("0.91")}
    assert cache.get("rates:USD") is None


@pytest.mark.asyncio
async def test_all_providers_down_and_stale_store_is_unavailable(cache, rate_store):
    rate_store.append_rates("USD", {"EUR": Decimal("0.90")}, "a", observed_at=utcnow() - timedelta(hours=25))
    service = _failing_service(cache, rate_store)

    with pytest.raises(DataUnavailable):
        await service.get_latest_rates("USD")


@pytest.mark.asyncio
async def test_persistence_failure_does_not_fail_the_read(rate_provider, cache, rate_store, monkeypatch, caplog):
    def broken_append(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(rate_store, "append_rates", broken_append)
    service = CurrencyService(ProviderChain("currency", [rate_provider]), cache, rate_store)

    snapshot = await service.get_latest_rates("USD")
    await service.drain_pending_writes()

    assert snapshot.rates["EUR"] == Decimal("0.92")
    assert "Failed to persist rates:USD" in caplog.text


@pytest.mark.asyncio
async def test_invalid_currency_code_is_rejected(currency_service, rate_provider):
    with pytest.raises(InvalidCurrencyCode):
        await currency_service.get_latest_rates("US1")
    assert rate_provider.calls == []


@pytest.mark.asyncio
async def test_specific_rate(currency_service):
    assert await currency_service.get_specific_rate("USD", "EUR") == Decimal("0.92")
    assert await currency_service.get_specific_rate("eur", "EUR") == Decimal("1")
    assert await currency_service.get_rate_against_usd("GBP") == Decimal("1.27")
    assert await currency_service.get_rate_against_usd("usd") == Decimal("1")


@pytest.mark.asyncio
async def test_specific_rate_missing_target_is_unavailable(currency_service):
    with pytest.raises(DataUnavailable):
        await currency_service.get_specific_rate("USD", "CHF")


@pytest.mark.asyncio
async def test_convert_same_currency_is_identity(currency_service, rate_provider):
    conversion = await currency_service.convert("USD", "usd", Decimal("12.34"))

    assert conversion.converted == Decimal("12.34")
    assert conversion.rate == Decimal("1")
    assert rate_provider.calls == []


@pytest.mark.asyncio
async def test_convert_multiplies_by_rate(currency_service):
    conversion = await currency_service.convert("USD", "EUR", Decimal("100"))
    assert conversion.converted == Decimal("92.00")


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
async def test_convert_rejects_non_positive_amount(currency_service, amount):
    with pytest.raises(InvalidAmount):
        await currency_service.convert("USD", "EUR", amount)


@pytest.mark.asyncio
async def test_historical_rates_window(currency_service, rate_store):
    rate_store.append_rates("USD", {"EUR": Decimal("0.90")}, "a", observed_at=utcnow() - timedelta(days=10))
    rate_store.append_rates("USD", {"EUR": Decimal("0.91")}, "a", observed_at=utcnow() - timedelta(days=1))

    assert len(await currency_service.historical_rates("USD", "EUR", 30)) == 2
    assert len(await currency_service.historical_rates("USD", "EUR", 7)) == 1
    with pytest.raises(InvalidDateRange):
        await currency_service.historical_rates("USD", "EUR", 0)
    with pytest.raises(InvalidDateRange):
        await currency_service.historical_rates("USD", "EUR", 366)


@pytest.mark.asyncio
async def test_supported_currencies_default_and_observed(currency_service):
    assert await currency_service.supported_currencies() == list(SUPPORTED_CURRENCIES)
    assert len(SUPPORTED_CURRENCIES) == 20

    await currency_service.get_latest_rates("USD")
    await currency_service.drain_pending_writes()
    assert await currency_service.supported_currencies() == ["EUR", "GBP", "JPY", "USD"]


@pytest.mark.asyncio
async def test_refresh_bypasses_cache_and_isolates_failures(cache, rate_store):
    provider = FakeRateProvider(rates={"USD": {"EUR": "0.92"}, "EUR": {"USD": "1.08"}})
    service = CurrencyService(ProviderChain("currency", [provider]), cache, rate_store)
    await service.get_latest_rates("USD")

    report = await service.refresh_major_rates()
    await service.drain_pending_writes()

    assert report.succeeded == ["USD", "EUR"]
    assert set(report.failed) == {"GBP", "JPY"}
    assert provider.calls.count("USD") == 2


@pytest.mark.asyncio
async def test_refresh_survives_store_error_for_one_base(cache, rate_store, monkeypatch):
    provider = FakeRateProvider(
        rates={
            "EUR": {"USD": "1.087"},
            "GBP": {"USD": "1.27"},
            "JPY": {"USD": "0.0066"},
        }
    )
    service = CurrencyService(ProviderChain("currency", [provider]), cache, rate_store)
    recent_rates = rate_store.recent_rates

    def recent_rates_or_fail(base, since):
        if base == "USD":
            raise OperationalError("SELECT", {}, Exception("db down"))
        return recent_rates(base, since)

    monkeypatch.setattr(rate_store, "recent_rates", recent_rates_or_fail)

    report = await service.refresh_major_rates()
    await service.drain_pending_writes()

    assert report.succeeded == ["EUR", "GBP", "JPY"]
    assert list(report.failed) == ["USD"]
    assert "db down" in report.failed["USD"]


@pytest.mark.asyncio
async def test_purge_old_records(currency_service, rate_store):
    rate_store.append_rates("USD", {"EUR": Decimal("0.9")}, "a", observed_at=utcnow() - timedelta(days=45))
    rate_store.append_rates("USD", {"EUR": Decimal("0.9")}, "a")

    assert await currency_service.purge_old_records(30) == 1


@pytest.mark.asyncio
async def test_health_check(currency_service):
    health = await currency_service.health_check()
    assert health.status == "healthy"
    assert health.last_update is None


@pytest.mark.asyncio
async def test_cache_ttl_expiry_refetches(rate_provider, rate_store):
    now = [0.0]
    cache = TTLCache(clock=lambda: now[0])
    service = CurrencyService(ProviderChain("currency", [rate_provider]), cache, rate_store)

    await service.get_latest_rates("USD")
    now[0] += 3601
    await service.get_latest_rates("USD")
    await service.drain_pending_writes()

    assert rate_provider.calls == ["USD", "USD"]
