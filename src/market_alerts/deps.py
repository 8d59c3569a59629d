"""FastAPI dependency injection: app.state.container holds singletons; Depends() resolves them."""
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from market_alerts.services import (AlertService, BudgetService,
                                    CurrencyService, StockService)


def get_currency_service(request: Request) -> CurrencyService:
    """Resolve CurrencyService from the container on app.state."""
    return request.app.state.container.currency_service()


def get_stock_service(request: Request) -> StockService:
    return request.app.state.container.stock_service()


def get_alert_service(request: Request) -> AlertService:
    return request.app.state.container.alert_service()


def get_budget_service(request: Request) -> BudgetService:
    return request.app.state.container.budget_service()


def get_owner_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Authenticated owner id, set by the upstream gateway in X-User-Id."""
    owner_id = (x_user_id or "").strip()
    if not owner_id:
        raise HTTPException(401, detail="Missing X-User-Id header")
    return owner_id


# Type aliases for route injection
CurrencyServiceDep = Annotated[CurrencyService, Depends(get_currency_service)]
StockServiceDep = Annotated[StockService, Depends(get_stock_service)]
AlertServiceDep = Annotated[AlertService, Depends(get_alert_service)]
BudgetServiceDep = Annotated[BudgetService, Depends(get_budget_service)]
OwnerId = Annotated[str, Depends(get_owner_id)]
