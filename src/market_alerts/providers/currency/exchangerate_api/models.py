"""Models for the ExchangeRate-API v6 provider."""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ExchangeRateApiLatest(BaseModel):
    """Body of GET /v6/{key}/latest/{base}."""

    model_config = ConfigDict(populate_by_name=True)

    result: str | None = None
    base_code: str | None = None
    conversion_rates: dict[str, Decimal] | None = None
    time_last_update_unix: int | None = None
    error_type: str | None = Field(default=None, alias="error-type")
