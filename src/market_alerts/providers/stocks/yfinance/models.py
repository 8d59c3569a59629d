"""Models for YFinance provider (raw ticker snapshot before normalization)."""
from pydantic import BaseModel


class YFinanceSnapshot(BaseModel):
    """Fields read from Ticker.fast_info (or Ticker.info as a fallback)."""

    price: float
    open: float | None = None
    high: float | None = None
    low: float | None = None
    volume: float | None = None
    previous_close: float | None = None
    company_name: str | None = None
