"""Models for the Fixer provider."""
from decimal import Decimal

from pydantic import BaseModel


class FixerError(BaseModel):
    code: int | None = None
    type: str | None = None
    info: str | None = None


class FixerLatest(BaseModel):
    """Body of GET /api/latest."""

    success: bool = False
    timestamp: int | None = None
    base: str | None = None
    date: str | None = None
    rates: dict[str, Decimal] | None = None
    error: FixerError | None = None


class FixerLatestParams(BaseModel):
    """Query params for /api/latest."""

    access_key: str
    base: str
