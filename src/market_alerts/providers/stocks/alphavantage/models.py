"""Models for the Alpha Vantage provider (GLOBAL_QUOTE and SYMBOL_SEARCH bodies)."""
from pydantic import BaseModel, ConfigDict, Field


class AlphaVantageGlobalQuote(BaseModel):
    """The "Global Quote" object; numbers arrive as strings."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(alias="01. symbol")
    open: str = Field(default="0", alias="02. open")
    high: str = Field(default="0", alias="03. high")
    low: str = Field(default="0", alias="04. low")
    price: str = Field(alias="05. price")
    volume: str = Field(default="0", alias="06. volume")
    latest_trading_day: str | None = Field(default=None, alias="07. latest trading day")
    previous_close: str | None = Field(default=None, alias="08. previous close")
    change: str = Field(default="0", alias="09. change")
    change_percent: str = Field(default="0%", alias="10. change percent")


class AlphaVantageMatch(BaseModel):
    """One entry of "bestMatches"."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(alias="1. symbol")
    name: str = Field(alias="2. name")
    type: str | None = Field(default=None, alias="3. type")
    region: str | None = Field(default=None, alias="4. region")
    market_open: str | None = Field(default=None, alias="5. marketOpen")
    market_close: str | None = Field(default=None, alias="6. marketClose")
    timezone: str | None = Field(default=None, alias="7. timezone")
    currency: str | None = Field(default=None, alias="8. currency")
    match_score: str | None = Field(default=None, alias="9. matchScore")


class AlphaVantageQueryParams(BaseModel):
    """Params for /query. Merge with symbol or keywords at call site."""

    function: str
    apikey: str
