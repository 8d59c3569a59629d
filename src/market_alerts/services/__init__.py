"""Service layer: market data orchestration, alerts, and budgets."""
from market_alerts.services.alert_evaluator import (AlertEvaluator,
                                                    SweepReport,
                                                    should_trigger)
from market_alerts.services.alert_service import AlertService
from market_alerts.services.budget_service import BudgetService
from market_alerts.services.currency_service import Conversion, CurrencyService
from market_alerts.services.market_data_service import (BatchReport,
                                                        MarketDataService)
from market_alerts.services.stock_service import StockService

__all__ = [
    "AlertEvaluator",
    "AlertService",
    "BatchReport",
    "BudgetService",
    "Conversion",
    "CurrencyService",
    "MarketDataService",
    "StockService",
    "SweepReport",
    "should_trigger",
]
