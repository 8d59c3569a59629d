"""API routers.

Includes routes for:
- /alerts - Threshold alerts of the calling user
- /currency - Exchange rates and conversion
- /stocks - Stock quotes, search, trending and indices
- /budgets - Budgets in foreign currencies
"""
from market_alerts.routers.alerts import router as alerts_router
from market_alerts.routers.budgets import router as budgets_router
from market_alerts.routers.currency import router as currency_router
from market_alerts.routers.stocks import router as stocks_router

__all__ = [
    "alerts_router",
    "budgets_router",
    "currency_router",
    "stocks_router",
]
