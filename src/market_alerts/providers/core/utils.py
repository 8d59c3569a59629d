"""Shared utilities for market data providers."""
import re
from decimal import Decimal

from market_alerts.errors import InvalidCurrencyCode, InvalidSymbol

DECIMALS = 2
RATE_DECIMALS = 5
MAX_SYMBOL_LENGTH = 20

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


def normalize_stock_symbol(symbol: str) -> str:
    """Normalize a stock symbol (trimmed, uppercase). Raises InvalidSymbol if empty or too long."""
    sym = (symbol or "").strip().upper()
    if not sym:
        raise InvalidSymbol("Stock symbol is required")
    if len(sym) > MAX_SYMBOL_LENGTH:
        raise InvalidSymbol(f"Stock symbol must be at most {MAX_SYMBOL_LENGTH} characters")
    return sym


def normalize_currency_code(code: str) -> str:
    """Normalize an ISO 4217 code (uppercase). Raises InvalidCurrencyCode otherwise."""
    norm = (code or "").strip().upper()
    if not _CURRENCY_CODE.match(norm):
        raise InvalidCurrencyCode(
            f"Invalid currency code '{code}'. Must be a 3-letter ISO code."
        )
    return norm


def round2(x: Decimal | float | None) -> float | None:
    """Round a value to 2 decimal places; preserve None."""
    if x is None:
        return None
    return round(float(x), DECIMALS)


def round5(x: Decimal | float | None) -> float | None:
    """Round a rate to 5 decimal places for display; preserve None."""
    if x is None:
        return None
    return round(float(x), RATE_DECIMALS)
