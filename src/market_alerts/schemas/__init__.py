"""Pydantic schemas for API and runtime use. Not persisted to DB."""
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from market_alerts.schemas.alerts import ActiveAlertCount, AlertCreate, AlertRead
from market_alerts.schemas.budgets import (BudgetConversion, BudgetCreate,
                                           BudgetRead, BudgetSummary,
                                           BudgetSummaryItem, BudgetUpdate)
from market_alerts.schemas.market import (ConversionRequest, ConversionResult,
                                          CurrencyHealth, HistoricalRatePoint,
                                          HistoricalRates, JsonDecimal,
                                          LatestRates, MarketIndices,
                                          RatesSnapshot, SpecificRate,
                                          StockPriceRead, StockQuote,
                                          SupportedCurrencies, SymbolMatch)
from market_alerts.utils import utcnow

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: {success, data, timestamp}."""

    success: bool = True
    data: T
    timestamp: datetime = Field(default_factory=utcnow)


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Failure envelope: {success: false, error: {code, message}, timestamp}."""

    success: bool = False
    error: ErrorDetail
    timestamp: datetime = Field(default_factory=utcnow)


__all__ = [
    "ActiveAlertCount",
    "AlertCreate",
    "AlertRead",
    "ApiResponse",
    "BudgetConversion",
    "BudgetCreate",
    "BudgetRead",
    "BudgetSummary",
    "BudgetSummaryItem",
    "BudgetUpdate",
    "ConversionRequest",
    "ConversionResult",
    "CurrencyHealth",
    "ErrorDetail",
    "ErrorResponse",
    "HistoricalRatePoint",
    "HistoricalRates",
    "JsonDecimal",
    "LatestRates",
    "MarketIndices",
    "RatesSnapshot",
    "SpecificRate",
    "StockPriceRead",
    "StockQuote",
    "SupportedCurrencies",
    "SymbolMatch",
]
