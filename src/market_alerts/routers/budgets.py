"""Budget routes. Every route acts on the budgets of the caller (X-User-Id)."""
import uuid

from fastapi import APIRouter, Query, Response, status

from market_alerts.db import BudgetCategory, BudgetPeriod
from market_alerts.deps import BudgetServiceDep, OwnerId
from market_alerts.schemas import (ApiResponse, BudgetConversion, BudgetCreate,
                                   BudgetRead, BudgetSummary, BudgetUpdate)

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.post(
    "", response_model=ApiResponse[BudgetRead], status_code=status.HTTP_201_CREATED
)
async def create_budget(
    body: BudgetCreate, owner_id: OwnerId, service: BudgetServiceDep
) -> ApiResponse[BudgetRead]:
    budget = await service.create_budget(owner_id, body)
    return ApiResponse(data=BudgetRead.model_validate(budget))


@router.get("", response_model=ApiResponse[list[BudgetRead]])
async def list_budgets(
    owner_id: OwnerId,
    service: BudgetServiceDep,
    category: BudgetCategory | None = Query(default=None),
    period: BudgetPeriod | None = Query(default=None),
    active: bool = Query(default=False, description="Only budgets whose dates contain now"),
) -> ApiResponse[list[BudgetRead]]:
    """List budgets, optionally filtered by category, period, or active window."""
    if active:
        budgets = await service.active_budgets(owner_id)
    elif period is not None:
        budgets = await service.budgets_by_period(owner_id, period)
    elif category is not None:
        budgets = await service.budgets_by_category(owner_id, category)
    else:
        budgets = await service.list_budgets(owner_id)
    if category is not None:
        budgets = [b for b in budgets if category.value in b.categories]
    if period is not None and active:
        budgets = [b for b in budgets if b.period == period]
    return ApiResponse(data=[BudgetRead.model_validate(b) for b in budgets])


@router.get("/summary", response_model=ApiResponse[BudgetSummary])
async def budget_summary(
    owner_id: OwnerId,
    service: BudgetServiceDep,
    currency: str = Query(default="USD", description="Currency to total in"),
) -> ApiResponse[BudgetSummary]:
    """Total of every budget converted into one currency."""
    return ApiResponse(data=await service.budget_summary(owner_id, currency))


@router.get("/{budget_id}", response_model=ApiResponse[BudgetRead])
async def get_budget(
    budget_id: uuid.UUID, owner_id: OwnerId, service: BudgetServiceDep
) -> ApiResponse[BudgetRead]:
    budget = await service.get_budget(owner_id, budget_id)
    return ApiResponse(data=BudgetRead.model_validate(budget))


@router.put("/{budget_id}", response_model=ApiResponse[BudgetRead])
async def update_budget(
    budget_id: uuid.UUID, body: BudgetUpdate, owner_id: OwnerId, service: BudgetServiceDep
) -> ApiResponse[BudgetRead]:
    budget = await service.update_budget(owner_id, budget_id, body)
    return ApiResponse(data=BudgetRead.model_validate(budget))


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: uuid.UUID, owner_id: OwnerId, service: BudgetServiceDep
) -> Response:
    await service.delete_budget(owner_id, budget_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{budget_id}/convert", response_model=ApiResponse[BudgetConversion])
async def convert_budget(
    budget_id: uuid.UUID,
    owner_id: OwnerId,
    service: BudgetServiceDep,
    currency: str = Query(description="Target currency (ISO 4217)"),
) -> ApiResponse[BudgetConversion]:
    return ApiResponse(data=await service.convert_budget(owner_id, budget_id, currency))
