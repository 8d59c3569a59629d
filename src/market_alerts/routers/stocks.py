"""Stock market data routes."""
from fastapi import APIRouter, Query

from market_alerts.deps import StockServiceDep
from market_alerts.schemas import (ApiResponse, MarketIndices, StockPriceRead,
                                   StockQuote, SymbolMatch)

router = APIRouter(prefix="/stocks", tags=["stocks"])


@router.get("/quote/{symbol}", response_model=ApiResponse[StockQuote])
async def get_stock_quote(symbol: str, service: StockServiceDep) -> ApiResponse[StockQuote]:
    """Get the current quote for a stock symbol.

    Args:
        symbol: Stock ticker (e.g., "AAPL", "MSFT", "^GSPC").

    Returns:
        Current quote with price, day range, volume and change.
    """
    return ApiResponse(data=await service.get_quote(symbol))


@router.get("/historical/{symbol}", response_model=ApiResponse[list[StockPriceRead]])
async def get_stock_history(
    symbol: str,
    service: StockServiceDep,
    days: int = Query(default=30, description="Number of stored observations (1-365)"),
) -> ApiResponse[list[StockPriceRead]]:
    """Get the most recent stored observations for a symbol, newest first."""
    records = await service.historical_prices(symbol, days)
    return ApiResponse(data=[StockPriceRead.model_validate(r) for r in records])


@router.get("/search/{query}", response_model=ApiResponse[list[SymbolMatch]])
async def search_stocks(query: str, service: StockServiceDep) -> ApiResponse[list[SymbolMatch]]:
    """Search symbols by keyword (at most ten matches)."""
    return ApiResponse(data=await service.search(query))


@router.get("/trending", response_model=ApiResponse[list[StockQuote]])
async def get_trending(service: StockServiceDep) -> ApiResponse[list[StockQuote]]:
    return ApiResponse(data=await service.trending())


@router.get("/market-indices", response_model=ApiResponse[MarketIndices])
async def get_market_indices(service: StockServiceDep) -> ApiResponse[MarketIndices]:
    """S&P 500, Dow Jones and NASDAQ quotes; an unavailable index is null."""
    return ApiResponse(data=await service.market_indices())
