"""Budget request/response schemas."""
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from market_alerts.db.models import BudgetCategory, BudgetPeriod
from market_alerts.schemas.market import JsonDecimal


class BudgetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    amount: Decimal = Field(gt=0, decimal_places=2)
    currency: str = Field(min_length=3, max_length=3)
    categories: list[BudgetCategory] = Field(default_factory=list)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: datetime | None = None
    end_date: datetime | None = None


class BudgetUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    categories: list[BudgetCategory] | None = None
    period: BudgetPeriod | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class BudgetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    amount: JsonDecimal
    currency: str
    categories: list[BudgetCategory]
    period: BudgetPeriod
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime
    updated_at: datetime


class BudgetConversion(BaseModel):
    budget_id: uuid.UUID
    amount: float
    currency: str
    converted_amount: float
    target_currency: str


class BudgetSummaryItem(BudgetRead):
    converted_amount: float


class BudgetSummary(BaseModel):
    total: float
    base_currency: str
    budgets: list[BudgetSummaryItem]
