"""Shared utilities for market alerts."""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation


def utcnow() -> datetime:
    """Timezone-aware UTC now; every stored timestamp is aware UTC."""
    return datetime.now(timezone.utc)


def parse_timestamp(ts: float | None) -> datetime:
    """Convert optional Unix timestamp (seconds) to aware UTC datetime; fallback to now."""
    if ts is None:
        return utcnow()
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def to_decimal(value: object) -> Decimal:
    """Parse a provider number (str, int, float) into a Decimal.

    Floats go through str() so 0.1 stays 0.1. Raises ValueError on garbage.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    try:
        result = Decimal(str(value).strip().rstrip("%"))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def to_utc(value: datetime | None) -> datetime | None:
    """Convert to aware UTC; naive values are taken as UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
