"""DI container. Build with init_container(); main attaches it to app.state.

Every component is a process-wide singleton passed by reference. Tests swap
pieces with container.<name>.override(...) before the app starts.
"""
from dependency_injector import containers, providers

from market_alerts.cache import TTLCache
from market_alerts.config import Settings
from market_alerts.db import (AlertStore, BudgetStore, Database, PriceStore,
                              RateStore)
from market_alerts.notifiers import build_notifier
from market_alerts.providers import (AlphaVantageProvider,
                                     ExchangeRateApiProvider, FixerProvider,
                                     ProviderChain, YFinanceProvider)
from market_alerts.scheduling import MarketScheduler, ScheduleConfig
from market_alerts.services import (AlertEvaluator, AlertService,
                                    BudgetService, CurrencyService,
                                    StockService)


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings.from_env)

    database = providers.Singleton(
        Database,
        settings.provided.database_url,
        echo=settings.provided.sql_echo,
    )
    cache = providers.Singleton(TTLCache, max_entries=settings.provided.cache_max_entries)

    rate_store = providers.Singleton(RateStore, database)
    price_store = providers.Singleton(PriceStore, database)
    alert_store = providers.Singleton(AlertStore, database)
    budget_store = providers.Singleton(BudgetStore, database)

    # Ordered: the first provider is tried first.
    rate_providers = providers.List(
        providers.Singleton(
            ExchangeRateApiProvider,
            api_key=settings.provided.exchange_rate_api_key,
            timeout=settings.provided.provider_timeout_seconds,
        ),
        providers.Singleton(
            FixerProvider,
            api_key=settings.provided.fixer_api_key,
            timeout=settings.provided.provider_timeout_seconds,
        ),
    )
    stock_providers = providers.List(
        providers.Singleton(
            AlphaVantageProvider,
            api_key=settings.provided.alpha_vantage_api_key,
            timeout=settings.provided.provider_timeout_seconds,
        ),
        providers.Singleton(YFinanceProvider),
    )

    currency_chain = providers.Singleton(
        ProviderChain,
        "currency",
        rate_providers,
        timeout_seconds=settings.provided.provider_timeout_seconds,
    )
    stock_chain = providers.Singleton(
        ProviderChain,
        "stock",
        stock_providers,
        timeout_seconds=settings.provided.provider_timeout_seconds,
    )

    currency_service = providers.Singleton(CurrencyService, currency_chain, cache, rate_store)
    stock_service = providers.Singleton(StockService, stock_chain, cache, price_store)
    alert_service = providers.Singleton(AlertService, alert_store)
    budget_service = providers.Singleton(BudgetService, budget_store, currency_service)

    notifier = providers.Singleton(build_notifier, settings)
    alert_evaluator = providers.Singleton(
        AlertEvaluator,
        alert_store,
        currency_service,
        stock_service,
        notifier,
        concurrency=settings.provided.alert_sweep_concurrency,
    )

    schedule_config = providers.Singleton(
        ScheduleConfig,
        alert_sweep_seconds=settings.provided.alert_sweep_interval_seconds,
        market_refresh_seconds=settings.provided.market_refresh_interval_seconds,
        reaper_seconds=settings.provided.record_reaper_interval_seconds,
        retention_days=settings.provided.record_retention_days,
    )
    scheduler = providers.Singleton(
        MarketScheduler,
        alert_evaluator,
        currency_service,
        stock_service,
        schedule_config,
    )


def init_container(settings: Settings | None = None) -> Container:
    """Create the container, optionally pinned to explicit settings."""
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    return container
