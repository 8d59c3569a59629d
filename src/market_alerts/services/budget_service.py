"""Owner-scoped budgets held in foreign currencies."""
import asyncio
import logging
import uuid
from datetime import datetime
from decimal import Decimal

from market_alerts.db import Budget, BudgetCategory, BudgetPeriod, BudgetStore
from market_alerts.errors import (DataUnavailable, InvalidDateRange,
                                  InvalidInput, MarketAlertsError, NotFound)
from market_alerts.providers.core import normalize_currency_code, round2
from market_alerts.schemas import (BudgetConversion, BudgetCreate, BudgetRead,
                                   BudgetSummary, BudgetSummaryItem,
                                   BudgetUpdate)
from market_alerts.services.currency_service import CurrencyService
from market_alerts.utils import to_utc, utcnow

logger = logging.getLogger(__name__)


def _check_dates(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and start >= end:
        raise InvalidDateRange("Start date must be before end date")


class BudgetService:
    """Budget CRUD plus conversion into other currencies."""

    def __init__(self, store: BudgetStore, currency_service: CurrencyService) -> None:
        self._store = store
        self._currency = currency_service

    async def create_budget(self, owner_id: str, payload: BudgetCreate) -> Budget:
        start_date = to_utc(payload.start_date)
        end_date = to_utc(payload.end_date)
        _check_dates(start_date, end_date)
        budget = Budget(
            owner_id=owner_id,
            name=payload.name,
            amount=payload.amount,
            currency=normalize_currency_code(payload.currency),
            categories=[c.value for c in payload.categories],
            period=payload.period,
            start_date=start_date,
            end_date=end_date,
        )
        created = await asyncio.to_thread(self._store.add, budget)
        logger.info("Budget %s created for %s", created.id, owner_id)
        return created

    async def list_budgets(self, owner_id: str) -> list[Budget]:
        return await asyncio.to_thread(self._store.list_for_owner, owner_id)

    async def get_budget(self, owner_id: str, budget_id: uuid.UUID) -> Budget:
        budget = await asyncio.to_thread(self._store.get_for_owner, budget_id, owner_id)
        if budget is None:
            raise NotFound(f"Budget with ID {budget_id} not found")
        return budget

    async def update_budget(
        self, owner_id: str, budget_id: uuid.UUID, payload: BudgetUpdate
    ) -> Budget:
        """Apply the fields present in payload; dates are re-validated together."""
        current = await self.get_budget(owner_id, budget_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("currency") is not None:
            changes["currency"] = normalize_currency_code(changes["currency"])
        if changes.get("categories") is not None:
            changes["categories"] = [BudgetCategory(c).value for c in changes["categories"]]
        for field in ("start_date", "end_date"):
            if field in changes:
                changes[field] = to_utc(changes[field])
        for field in ("name", "amount", "currency", "categories", "period"):
            if field in changes and changes[field] is None:
                raise InvalidInput(f"{field} cannot be null")
        _check_dates(
            changes.get("start_date", current.start_date),
            changes.get("end_date", current.end_date),
        )
        updated = await asyncio.to_thread(
            self._store.update_for_owner, budget_id, owner_id, changes
        )
        if updated is None:
            raise NotFound(f"Budget with ID {budget_id} not found")
        return updated

    async def delete_budget(self, owner_id: str, budget_id: uuid.UUID) -> None:
        deleted = await asyncio.to_thread(self._store.delete_for_owner, budget_id, owner_id)
        if not deleted:
            raise NotFound(f"Budget with ID {budget_id} not found")

    async def _convert_amount(self, amount: Decimal, source: str, target: str) -> Decimal:
        if source == target:
            return amount
        try:
            conversion = await self._currency.convert(source, target, amount)
        except InvalidInput:
            raise
        except MarketAlertsError as e:
            raise DataUnavailable(
                f"Failed to convert budget amount from {source} to {target}"
            ) from e
        return conversion.converted

    async def convert_budget(
        self, owner_id: str, budget_id: uuid.UUID, currency: str
    ) -> BudgetConversion:
        target = normalize_currency_code(currency)
        budget = await self.get_budget(owner_id, budget_id)
        converted = await self._convert_amount(budget.amount, budget.currency, target)
        return BudgetConversion(
            budget_id=budget.id,
            amount=round2(budget.amount),
            currency=budget.currency,
            converted_amount=round2(converted),
            target_currency=target,
        )

    async def budget_summary(self, owner_id: str, base: str = "USD") -> BudgetSummary:
        """Every budget converted to base; a failed conversion counts as 0."""
        base = normalize_currency_code(base)
        budgets = await self.list_budgets(owner_id)
        items: list[BudgetSummaryItem] = []
        total = Decimal("0")
        for budget in budgets:
            try:
                converted = await self._convert_amount(budget.amount, budget.currency, base)
            except MarketAlertsError as e:
                logger.warning("Failed to convert budget %s to %s: %s", budget.id, base, e)
                converted = Decimal("0")
            total += converted
            items.append(
                BudgetSummaryItem(
                    **BudgetRead.model_validate(budget).model_dump(),
                    converted_amount=round2(converted),
                )
            )
        return BudgetSummary(total=round2(total), base_currency=base, budgets=items)

    async def budgets_by_category(
        self, owner_id: str, category: BudgetCategory
    ) -> list[Budget]:
        budgets = await self.list_budgets(owner_id)
        return [b for b in budgets if category.value in b.categories]

    async def budgets_by_period(self, owner_id: str, period: BudgetPeriod) -> list[Budget]:
        return await asyncio.to_thread(self._store.list_for_owner, owner_id, period)

    async def active_budgets(self, owner_id: str, now: datetime | None = None) -> list[Budget]:
        """Budgets whose date window (if any) contains now."""
        return await asyncio.to_thread(
            self._store.list_active_for_owner, owner_id, to_utc(now) or utcnow()
        )
