"""Market data payloads shared by providers, services, cache, and API."""
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from market_alerts.db.models import StockPriceRecord
from market_alerts.utils import utcnow

# Full precision internally; JSON clients get numbers rather than strings.
JsonDecimal = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class RatesSnapshot(BaseModel):
    """Exchange rates for one base currency as returned by a provider (or the store)."""

    base: str
    rates: dict[str, JsonDecimal]
    timestamp: datetime = Field(default_factory=utcnow)
    source: str


class StockQuote(BaseModel):
    """Unified stock quote across providers."""

    symbol: str
    price: JsonDecimal
    open: JsonDecimal = Decimal("0")
    high: JsonDecimal = Decimal("0")
    low: JsonDecimal = Decimal("0")
    volume: int = 0
    change: JsonDecimal = Decimal("0")
    change_percent: JsonDecimal = Decimal("0")
    previous_close: JsonDecimal | None = None
    latest_trading_day: str | None = None
    company_name: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)
    source: str

    @classmethod
    def from_record(cls, record: StockPriceRecord) -> "StockQuote":
        return cls(
            symbol=record.symbol,
            price=record.price,
            open=record.open,
            high=record.high,
            low=record.low,
            volume=record.volume,
            change=record.change,
            change_percent=record.change_percent,
            previous_close=record.previous_close,
            latest_trading_day=record.latest_trading_day,
            company_name=record.company_name,
            timestamp=record.observed_at,
            source=record.source or "store",
        )

    def to_record(self) -> StockPriceRecord:
        return StockPriceRecord(
            symbol=self.symbol,
            price=self.price,
            open=self.open,
            high=self.high,
            low=self.low,
            volume=self.volume,
            change=self.change,
            change_percent=self.change_percent,
            previous_close=self.previous_close,
            latest_trading_day=self.latest_trading_day,
            company_name=self.company_name,
            observed_at=self.timestamp,
            source=self.source,
        )


class SymbolMatch(BaseModel):
    """One symbol search hit."""

    symbol: str
    name: str
    type: str | None = None
    region: str | None = None
    market_open: str | None = None
    market_close: str | None = None
    timezone: str | None = None
    currency: str | None = None
    match_score: float | None = None


class StockPriceRead(BaseModel):
    """Stored stock observation as exposed over HTTP."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str
    price: JsonDecimal
    open: JsonDecimal
    high: JsonDecimal
    low: JsonDecimal
    volume: int
    change: JsonDecimal
    change_percent: JsonDecimal
    previous_close: JsonDecimal | None = None
    latest_trading_day: str | None = None
    company_name: str | None = None
    observed_at: datetime
    source: str | None = None


class MarketIndices(BaseModel):
    """Headline US indices; an index whose quote failed is null."""

    sp500: StockQuote | None = None
    dow_jones: StockQuote | None = Field(default=None, serialization_alias="dowJones")
    nasdaq: StockQuote | None = None


class LatestRates(BaseModel):
    base: str
    rates: dict[str, float]
    timestamp: datetime
    source: str


class SpecificRate(BaseModel):
    base: str
    target: str
    rate: float
    timestamp: datetime


class HistoricalRatePoint(BaseModel):
    rate: float
    timestamp: datetime
    source: str | None = None


class HistoricalRates(BaseModel):
    base: str
    target: str
    days: int
    rates: list[HistoricalRatePoint]


class ConversionRequest(BaseModel):
    """Body of POST /currency/convert ({"from": "USD", "to": "EUR", "amount": 10})."""

    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(alias="from", min_length=1)
    to_currency: str = Field(alias="to", min_length=1)
    amount: Decimal


class ConversionResult(BaseModel):
    from_currency: str
    to_currency: str
    original_amount: float
    converted_amount: float
    rate: float
    timestamp: datetime


class SupportedCurrencies(BaseModel):
    currencies: list[str]
    count: int


class CurrencyHealth(BaseModel):
    status: str
    last_update: datetime | None = None
    cache_status: str
