"""
Market Data API Router.

Quotes, FX rates and instrument search, served through the freshness-window
cache in MarketDataService.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from folio.api.deps import get_market_data_service
from folio.api.portfolio import QuoteSchema
from folio.services.market_data_service import MarketDataService

router = APIRouter()

# ---------- Pydantic Schemas ----------

class FxRateSchema(BaseModel):
    from_currency: str
    to_currency: str
    rate: Decimal
    last_updated: datetime

    class Config:
        from_attributes = True


class ConversionSchema(BaseModel):
    from_currency: str
    to_currency: str
    amount: Decimal
    rate: Decimal
    converted: Decimal


class InstrumentSchema(BaseModel):
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None
    instrument_type: Optional[str] = None

    class Config:
        from_attributes = True


# ---------- Endpoints ----------

@router.get("/market-data/{symbol}", response_model=QuoteSchema)
def get_market_data(
    symbol: str,
    market_data: MarketDataService = Depends(get_market_data_service),
):
    """Latest quote, refetched when the cached one is older than 5 minutes."""
    return market_data.get_quote(symbol)


@router.get("/currency/{from_currency}/{to_currency}", response_model=FxRateSchema)
def get_currency_rate(
    from_currency: str,
    to_currency: str,
    market_data: MarketDataService = Depends(get_market_data_service),
):
    """FX rate, refetched when the cached one is older than 1 hour."""
    return market_data.get_rate(from_currency, to_currency)


@router.get("/currency/{from_currency}/{to_currency}/convert", response_model=ConversionSchema)
def convert_currency(
    from_currency: str,
    to_currency: str,
    amount: Decimal = Query(...),
    market_data: MarketDataService = Depends(get_market_data_service),
):
    fx = market_data.get_rate(from_currency, to_currency)
    return ConversionSchema(
        from_currency=fx.from_currency,
        to_currency=fx.to_currency,
        amount=amount,
        rate=fx.rate,
        converted=amount * fx.rate,
    )


@router.get("/instruments/search", response_model=list[InstrumentSchema])
def search_instruments(
    q: str = Query(..., min_length=1),
    market_data: MarketDataService = Depends(get_market_data_service),
):
    return market_data.search_instruments(q)
