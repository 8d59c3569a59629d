"""Shared fixtures: a SQLite database, stores, fake providers, and services."""
from collections.abc import Generator
from pathlib import Path

import pytest
from fakes import FakeRateProvider, FakeStockProvider, RecordingNotifier

from market_alerts.cache import TTLCache
from market_alerts.db import (AlertStore, BudgetStore, Database, PriceStore,
                              RateStore)
from market_alerts.providers.core import ProviderChain
from market_alerts.services import (AlertEvaluator, AlertService,
                                    BudgetService, CurrencyService,
                                    StockService)

USD_RATES = {"USD": "1", "EUR": "0.92", "GBP": "0.79", "JPY": "151.2"}


@pytest.fixture
def database(tmp_path: Path) -> Generator[Database, None, None]:
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def rate_store(database: Database) -> RateStore:
    return RateStore(database)


@pytest.fixture
def price_store(database: Database) -> PriceStore:
    return PriceStore(database)


@pytest.fixture
def alert_store(database: Database) -> AlertStore:
    return AlertStore(database)


@pytest.fixture
def budget_store(database: Database) -> BudgetStore:
    return BudgetStore(database)


@pytest.fixture
def cache() -> TTLCache:
    return TTLCache()


@pytest.fixture
def rate_provider() -> FakeRateProvider:
    return FakeRateProvider(
        rates={
            "USD": USD_RATES,
            "EUR": {"EUR": "1", "USD": "1.087", "GBP": "0.86"},
            "GBP": {"GBP": "1", "USD": "1.27", "EUR": "1.16"},
            "JPY": {"JPY": "1", "USD": "0.0066"},
        }
    )


@pytest.fixture
def stock_provider() -> FakeStockProvider:
    return FakeStockProvider(
        prices={
            "AAPL": "153.00",
            "MSFT": "410.50",
            "GOOGL": "140.10",
            "AMZN": "178.20",
            "TSLA": "175.00",
            "META": "480.00",
            "NVDA": "880.00",
            "NFLX": "610.00",
            "^GSPC": "5100.00",
            "^DJI": "38900.00",
            "^IXIC": "16000.00",
        }
    )


@pytest.fixture
def currency_service(
    rate_provider: FakeRateProvider, cache: TTLCache, rate_store: RateStore
) -> CurrencyService:
    return CurrencyService(ProviderChain("currency", [rate_provider]), cache, rate_store)


@pytest.fixture
def stock_service(
    stock_provider: FakeStockProvider, cache: TTLCache, price_store: PriceStore
) -> StockService:
    return StockService(ProviderChain("stock", [stock_provider]), cache, price_store)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def alert_service(alert_store: AlertStore) -> AlertService:
    return AlertService(alert_store)


@pytest.fixture
def budget_service(budget_store: BudgetStore, currency_service: CurrencyService) -> BudgetService:
    return BudgetService(budget_store, currency_service)


@pytest.fixture
def evaluator(
    alert_store: AlertStore,
    currency_service: CurrencyService,
    stock_service: StockService,
    notifier: RecordingNotifier,
) -> AlertEvaluator:
    return AlertEvaluator(alert_store, currency_service, stock_service, notifier)
