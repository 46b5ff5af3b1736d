"""GET /api/price/{symbol} - Historical and live asset prices"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from cashback_tracker.api.dependencies import get_live_price_service, get_price_resolver, get_request_id
from cashback_tracker.api.v1.schemas import LivePriceResponse, PriceResponse
from cashback_tracker.config import settings
from cashback_tracker.domain.exceptions import LivePriceUnavailableError, PriceAPIError
from cashback_tracker.infrastructure.pricing import HistoricalPriceResolver, LivePriceService
from cashback_tracker.utils.date_utils import parse_iso_date

router = APIRouter()


def _check_symbol(symbol: str) -> None:
    if symbol.upper() != settings.asset_symbol.upper():
        raise HTTPException(status_code=404, detail=f"Unsupported symbol: {symbol}")


@router.get("/price/{symbol}", response_model=PriceResponse)
async def get_historical_price(
    symbol: str,
    request: Request,
    date: str = Query(..., description="Day to price, YYYY-MM-DD"),
    resolver: HistoricalPriceResolver = Depends(get_price_resolver),
):
    """
    Price for one day, served from the cache when possible.

    Returns:
        Price with its source: "cache" or "api"
    """
    _check_symbol(symbol)

    try:
        day = parse_iso_date(date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be in YYYY-MM-DD format")

    if day > resolver.today:
        raise HTTPException(status_code=400, detail="Date must not be in the future")

    try:
        quote = await resolver.lookup(day)
    except PriceAPIError as e:
        logging.error(f"Price API error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail="Failed to fetch price from upstream API")

    return PriceResponse(
        symbol=quote.symbol,
        date=quote.date.isoformat(),
        priceUSD=quote.price_usd,
        source=quote.source,
    )


@router.get("/price/{symbol}/live", response_model=LivePriceResponse)
async def get_live_price(
    symbol: str,
    request: Request,
    live_prices: LivePriceService = Depends(get_live_price_service),
):
    """Current price, cached for 15 minutes; served stale if a refresh fails"""
    _check_symbol(symbol)

    try:
        live = await live_prices.get()
    except LivePriceUnavailableError as e:
        logging.error(f"Live price unavailable: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail="Live price unavailable")

    return LivePriceResponse(
        symbol=live.symbol,
        priceUSD=live.price_usd,
        asOf=live.as_of,
        stale=live.stale,
        source=live.source,
    )
