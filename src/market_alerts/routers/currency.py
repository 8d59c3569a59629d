"""Exchange rate routes."""
from fastapi import APIRouter, Query

from market_alerts.deps import CurrencyServiceDep
from market_alerts.providers.core import round2, round5
from market_alerts.schemas import (ApiResponse, ConversionRequest,
                                   ConversionResult, CurrencyHealth,
                                   HistoricalRatePoint, HistoricalRates,
                                   LatestRates, SpecificRate,
                                   SupportedCurrencies)
from market_alerts.utils import utcnow

router = APIRouter(prefix="/currency", tags=["currency"])


@router.get("/rates", response_model=ApiResponse[LatestRates])
async def get_latest_rates(
    service: CurrencyServiceDep,
    base: str = Query(default="USD", description="Base currency (ISO 4217)"),
) -> ApiResponse[LatestRates]:
    """Get the latest rates for a base currency.

    Served from cache when fresh, from the providers otherwise, and from
    stored history when every provider is down.
    """
    snapshot = await service.get_latest_rates(base)
    return ApiResponse(
        data=LatestRates(
            base=snapshot.base,
            rates={code: round5(rate) for code, rate in snapshot.rates.items()},
            timestamp=snapshot.timestamp,
            source=snapshot.source,
        )
    )


@router.get("/rates/{base}/{target}/latest", response_model=ApiResponse[SpecificRate])
async def get_specific_rate(
    base: str, target: str, service: CurrencyServiceDep
) -> ApiResponse[SpecificRate]:
    rate = await service.get_specific_rate(base, target)
    return ApiResponse(
        data=SpecificRate(
            base=base.upper(), target=target.upper(), rate=round5(rate), timestamp=utcnow()
        )
    )


@router.get("/rates/{base}/{target}/history", response_model=ApiResponse[HistoricalRates])
async def get_historical_rates(
    base: str,
    target: str,
    service: CurrencyServiceDep,
    days: int = Query(default=30, description="Number of days of history (1-365)"),
) -> ApiResponse[HistoricalRates]:
    """Get stored rate observations for a pair, newest first."""
    records = await service.historical_rates(base, target, days)
    return ApiResponse(
        data=HistoricalRates(
            base=base.upper(),
            target=target.upper(),
            days=days,
            rates=[
                HistoricalRatePoint(
                    rate=round5(r.rate), timestamp=r.observed_at, source=r.source
                )
                for r in records
            ],
        )
    )


@router.post("/convert", response_model=ApiResponse[ConversionResult])
async def convert_currency(
    body: ConversionRequest, service: CurrencyServiceDep
) -> ApiResponse[ConversionResult]:
    """Convert an amount between two currencies at the latest rate."""
    conversion = await service.convert(body.from_currency, body.to_currency, body.amount)
    return ApiResponse(
        data=ConversionResult(
            from_currency=conversion.from_currency,
            to_currency=conversion.to_currency,
            original_amount=round2(conversion.amount),
            converted_amount=round2(conversion.converted),
            rate=round5(conversion.rate),
            timestamp=conversion.timestamp,
        )
    )


@router.get("/supported", response_model=ApiResponse[SupportedCurrencies])
async def get_supported_currencies(
    service: CurrencyServiceDep,
) -> ApiResponse[SupportedCurrencies]:
    currencies = await service.supported_currencies()
    return ApiResponse(data=SupportedCurrencies(currencies=currencies, count=len(currencies)))


@router.get("/health", response_model=ApiResponse[CurrencyHealth])
async def currency_health(service: CurrencyServiceDep) -> ApiResponse[CurrencyHealth]:
    return ApiResponse(data=await service.health_check())
