"""Durable stores over SQLModel sessions.

All methods are synchronous; async callers run them with asyncio.to_thread.
Empty results are valid and never raise.
"""
import uuid
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, update
from sqlmodel import col, select

from market_alerts.db.models import (Alert, Budget, BudgetPeriod, RateRecord,
                                     StockPriceRecord)
from market_alerts.db.sessions import Database
from market_alerts.errors import AlertAlreadyTriggered
from market_alerts.utils import utcnow


class RateStore:
    """Append-only history of exchange rates."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def append_rates(
        self,
        base: str,
        rates: Mapping[str, Decimal],
        source: str | None,
        observed_at: datetime | None = None,
    ) -> int:
        """Persist one snapshot (all rows in one transaction). Returns rows written."""
        observed_at = observed_at or utcnow()
        records = [
            RateRecord(
                base_currency=base,
                target_currency=target,
                rate=rate,
                observed_at=observed_at,
                source=source,
            )
            for target, rate in rates.items()
        ]
        with self._db.session() as session:
            session.add_all(records)
        return len(records)

    def recent_rates(self, base: str, since: datetime) -> list[RateRecord]:
        """Records for base observed after since, newest first."""
        with self._db.session() as session:
            stmt = (
                select(RateRecord)
                .where(RateRecord.base_currency == base)
                .where(RateRecord.observed_at > since)
                .order_by(col(RateRecord.observed_at).desc(), col(RateRecord.id).desc())
            )
            return list(session.exec(stmt).all())

    def history(self, base: str, target: str, since: datetime) -> list[RateRecord]:
        """Records for base -> target observed at or after since, newest first."""
        with self._db.session() as session:
            stmt = (
                select(RateRecord)
                .where(RateRecord.base_currency == base)
                .where(RateRecord.target_currency == target)
                .where(RateRecord.observed_at >= since)
                .order_by(col(RateRecord.observed_at).desc(), col(RateRecord.id).desc())
            )
            return list(session.exec(stmt).all())

    def targets_seen_since(self, since: datetime) -> list[str]:
        """Distinct target currencies observed after since, sorted."""
        with self._db.session() as session:
            stmt = (
                select(RateRecord.target_currency)
                .where(RateRecord.observed_at > since)
                .distinct()
            )
            return sorted(session.exec(stmt).all())

    def last_observed_at(self) -> datetime | None:
        with self._db.session() as session:
            return session.exec(select(func.max(RateRecord.observed_at))).one()

    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete records observed before cutoff. Returns the number deleted."""
        with self._db.session() as session:
            result = session.connection().execute(
                delete(RateRecord).where(col(RateRecord.observed_at) < cutoff)
            )
            return result.rowcount or 0


class PriceStore:
    """Append-only history of stock quotes."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def append(self, record: StockPriceRecord) -> StockPriceRecord:
        with self._db.session() as session:
            session.add(record)
        return record

    def latest(self, symbol: str, since: datetime) -> StockPriceRecord | None:
        """Most recent record for symbol observed after since, if any."""
        with self._db.session() as session:
            stmt = (
                select(StockPriceRecord)
                .where(StockPriceRecord.symbol == symbol)
                .where(StockPriceRecord.observed_at > since)
                .order_by(
                    col(StockPriceRecord.observed_at).desc(),
                    col(StockPriceRecord.id).desc(),
                )
                .limit(1)
            )
            return session.exec(stmt).first()

    def history(self, symbol: str, limit: int) -> list[StockPriceRecord]:
        """The limit most recent records for symbol, newest first."""
        with self._db.session() as session:
            stmt = (
                select(StockPriceRecord)
                .where(StockPriceRecord.symbol == symbol)
                .order_by(
                    col(StockPriceRecord.observed_at).desc(),
                    col(StockPriceRecord.id).desc(),
                )
                .limit(limit)
            )
            return list(session.exec(stmt).all())

    def delete_older_than(self, cutoff: datetime) -> int:
        with self._db.session() as session:
            result = session.connection().execute(
                delete(StockPriceRecord).where(
                    col(StockPriceRecord.observed_at) < cutoff
                )
            )
            return result.rowcount or 0


class AlertStore:
    """Alert persistence. Trigger is a conditional update; toggle is a row-locked read-modify-write."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def add(self, alert: Alert) -> Alert:
        with self._db.session() as session:
            session.add(alert)
        return alert

    def get_for_owner(self, alert_id: uuid.UUID, owner_id: str) -> Alert | None:
        with self._db.session() as session:
            stmt = select(Alert).where(Alert.id == alert_id, Alert.owner_id == owner_id)
            return session.exec(stmt).first()

    def get(self, alert_id: uuid.UUID) -> Alert | None:
        with self._db.session() as session:
            return session.get(Alert, alert_id)

    def list_for_owner(self, owner_id: str) -> list[Alert]:
        with self._db.session() as session:
            stmt = (
                select(Alert)
                .where(Alert.owner_id == owner_id)
                .order_by(col(Alert.created_at).desc())
            )
            return list(session.exec(stmt).all())

    def list_triggered_for_owner(self, owner_id: str) -> list[Alert]:
        with self._db.session() as session:
            stmt = (
                select(Alert)
                .where(Alert.owner_id == owner_id)
                .where(Alert.active == False)  # noqa: E712
                .where(col(Alert.triggered_at).is_not(None))
                .order_by(col(Alert.triggered_at).desc())
            )
            return list(session.exec(stmt).all())

    def count_active_for_owner(self, owner_id: str) -> int:
        with self._db.session() as session:
            stmt = (
                select(func.count())
                .select_from(Alert)
                .where(Alert.owner_id == owner_id)
                .where(Alert.active == True)  # noqa: E712
            )
            return session.exec(stmt).one()

    def list_active(self) -> list[Alert]:
        """Every alert still eligible for evaluation."""
        with self._db.session() as session:
            stmt = (
                select(Alert)
                .where(Alert.active == True)  # noqa: E712
                .where(col(Alert.triggered_at).is_(None))
                .order_by(col(Alert.created_at))
            )
            return list(session.exec(stmt).all())

    def delete_for_owner(self, alert_id: uuid.UUID, owner_id: str) -> bool:
        with self._db.session() as session:
            stmt = select(Alert).where(Alert.id == alert_id, Alert.owner_id == owner_id)
            alert = session.exec(stmt).first()
            if alert is None:
                return False
            session.delete(alert)
            return True

    def toggle_for_owner(self, alert_id: uuid.UUID, owner_id: str) -> Alert | None:
        """Flip active. Raises AlertAlreadyTriggered for terminal alerts."""
        with self._db.session() as session:
            stmt = (
                select(Alert)
                .where(Alert.id == alert_id, Alert.owner_id == owner_id)
                .with_for_update()
            )
            alert = session.exec(stmt).first()
            if alert is None:
                return None
            if alert.triggered_at is not None:
                raise AlertAlreadyTriggered(
                    f"Alert {alert_id} was triggered at {alert.triggered_at.isoformat()} "
                    "and cannot be re-armed"
                )
            alert.active = not alert.active
            alert.updated_at = utcnow()
            session.add(alert)
            return alert

    def mark_triggered(
        self, alert_id: uuid.UUID, value: Decimal, triggered_at: datetime
    ) -> Alert | None:
        """Deactivate and stamp an alert if it is still active.

        Returns the updated alert, or None when it was already triggered,
        deactivated, or deleted (the caller lost the claim).
        """
        with self._db.session() as session:
            result = session.connection().execute(
                update(Alert)
                .where(col(Alert.id) == alert_id)
                .where(col(Alert.active) == True)  # noqa: E712
                .where(col(Alert.triggered_at).is_(None))
                .values(
                    active=False,
                    triggered_at=triggered_at,
                    triggered_value=value,
                    updated_at=triggered_at,
                )
            )
            if result.rowcount != 1:
                return None
            return session.get(Alert, alert_id)


class BudgetStore:
    def __init__(self, db: Database) -> None:
        self._db = db

    def add(self, budget: Budget) -> Budget:
        with self._db.session() as session:
            session.add(budget)
        return budget

    def get_for_owner(self, budget_id: uuid.UUID, owner_id: str) -> Budget | None:
        with self._db.session() as session:
            stmt = select(Budget).where(
                Budget.id == budget_id, Budget.owner_id == owner_id
            )
            return session.exec(stmt).first()

    def list_for_owner(
        self, owner_id: str, period: BudgetPeriod | None = None
    ) -> list[Budget]:
        with self._db.session() as session:
            stmt = select(Budget).where(Budget.owner_id == owner_id)
            if period is not None:
                stmt = stmt.where(Budget.period == period)
            stmt = stmt.order_by(col(Budget.created_at).desc())
            return list(session.exec(stmt).all())

    def list_active_for_owner(self, owner_id: str, now: datetime) -> list[Budget]:
        """Budgets whose optional [start, end] window contains now."""
        with self._db.session() as session:
            stmt = (
                select(Budget)
                .where(Budget.owner_id == owner_id)
                .where(
                    (col(Budget.start_date).is_(None)) | (col(Budget.start_date) <= now)
                )
                .where((col(Budget.end_date).is_(None)) | (col(Budget.end_date) >= now))
                .order_by(col(Budget.created_at).desc())
            )
            return list(session.exec(stmt).all())

    def update_for_owner(
        self, budget_id: uuid.UUID, owner_id: str, changes: Mapping[str, Any]
    ) -> Budget | None:
        with self._db.session() as session:
            stmt = select(Budget).where(
                Budget.id == budget_id, Budget.owner_id == owner_id
            )
            budget = session.exec(stmt).first()
            if budget is None:
                return None
            for field, value in changes.items():
                setattr(budget, field, value)
            budget.updated_at = utcnow()
            session.add(budget)
            return budget

    def delete_for_owner(self, budget_id: uuid.UUID, owner_id: str) -> bool:
        with self._db.session() as session:
            stmt = select(Budget).where(
                Budget.id == budget_id, Budget.owner_id == owner_id
            )
            budget = session.exec(stmt).first()
            if budget is None:
                return False
            session.delete(budget)
            return True
