"""Database models for the market alerts service.

Alerts and budgets are user state. Rate and stock price records are append-only
market history: the fallback source when every provider fails, and the source
of historical series. Cached payloads live in memory only.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import JSON, Column, DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

from market_alerts.utils import utcnow


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC timestamp column.

    Naive values are taken as UTC on the way in; values read back from
    backends that drop the offset (SQLite) are stamped UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class InstrumentKind(str, Enum):
    """What an alert watches."""

    STOCK = "STOCK"
    CURRENCY = "CURRENCY"


class AlertCondition(str, Enum):
    ABOVE = "ABOVE"
    BELOW = "BELOW"


class BudgetCategory(str, Enum):
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    FOOD = "food"
    UTILITIES = "utilities"
    HEALTHCARE = "healthcare"
    INSURANCE = "insurance"
    ENTERTAINMENT = "entertainment"
    SAVINGS = "savings"
    INVESTMENTS = "investments"
    EDUCATION = "education"
    PERSONAL = "personal"
    OTHER = "other"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Alert(SQLModel, table=True):
    """One-shot threshold alert. Terminal once triggered_at is set."""

    __tablename__ = "alerts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: str = Field(index=True, max_length=64)
    kind: InstrumentKind
    target: str = Field(max_length=20)  # AAPL | EUR
    condition: AlertCondition
    threshold: Decimal = Field(max_digits=15, decimal_places=4)
    notify_address: str = Field(max_length=255)
    active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    triggered_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    triggered_value: Decimal | None = Field(
        default=None, max_digits=15, decimal_places=4
    )

    @property
    def is_triggered(self) -> bool:
        return self.triggered_at is not None


class RateRecord(SQLModel, table=True):
    """One observed exchange rate base -> target."""

    __tablename__ = "rate_records"

    id: int | None = Field(default=None, primary_key=True)
    base_currency: str = Field(max_length=3, index=True)
    target_currency: str = Field(max_length=3, index=True)
    rate: Decimal = Field(max_digits=19, decimal_places=8)
    observed_at: datetime = Field(
        default_factory=utcnow, index=True, sa_type=UTCDateTime
    )
    source: str | None = None  # exchangerate-api | fixer


class StockPriceRecord(SQLModel, table=True):
    """One observed stock quote."""

    __tablename__ = "stock_price_records"

    id: int | None = Field(default=None, primary_key=True)
    symbol: str = Field(max_length=20, index=True)
    price: Decimal = Field(max_digits=15, decimal_places=4)
    open: Decimal = Field(max_digits=15, decimal_places=4)
    high: Decimal = Field(max_digits=15, decimal_places=4)
    low: Decimal = Field(max_digits=15, decimal_places=4)
    volume: int = 0
    change: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=4)
    change_percent: Decimal = Field(
        default=Decimal("0"), max_digits=10, decimal_places=4
    )
    previous_close: Decimal | None = Field(
        default=None, max_digits=15, decimal_places=4
    )
    latest_trading_day: str | None = None
    observed_at: datetime = Field(
        default_factory=utcnow, index=True, sa_type=UTCDateTime
    )
    company_name: str | None = None
    source: str | None = None  # alpha-vantage | yfinance


class Budget(SQLModel, table=True):
    """A user budget held in one currency."""

    __tablename__ = "budgets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: str = Field(index=True, max_length=64)
    name: str = Field(max_length=100)
    amount: Decimal = Field(max_digits=15, decimal_places=2)
    currency: str = Field(max_length=3)
    categories: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: datetime | None = Field(default=None, sa_type=UTCDateTime)
    end_date: datetime | None = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
