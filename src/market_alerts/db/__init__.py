"""Database package: models, session management, and stores."""
from market_alerts.db.models import (Alert, AlertCondition, Budget,
                                     BudgetCategory, BudgetPeriod,
                                     InstrumentKind, RateRecord,
                                     StockPriceRecord)
from market_alerts.db.sessions import Database
from market_alerts.db.stores import AlertStore, BudgetStore, PriceStore, RateStore

__all__ = [
    "Alert",
    "AlertCondition",
    "AlertStore",
    "Budget",
    "BudgetCategory",
    "BudgetPeriod",
    "BudgetStore",
    "Database",
    "InstrumentKind",
    "PriceStore",
    "RateRecord",
    "RateStore",
    "StockPriceRecord",
]
