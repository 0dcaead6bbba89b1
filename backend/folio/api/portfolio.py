"""
Portfolio API Router.

Portfolios, their holdings projection and their transaction ledger.
"""
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from folio.api.deps import get_portfolio_service
from folio.models import NewTransaction, PerformanceMethod, TransactionType
from folio.services.portfolio_service import HoldingView, PortfolioService, PortfolioSummary

router = APIRouter()

# ---------- Pydantic Schemas ----------

class PortfolioCreate(BaseModel):
    name: str
    description: Optional[str] = None
    external_identifier: Optional[str] = None
    base_currency: str = "USD"
    tax_residency: str = "US"
    financial_year_end: str = "31st Mar"
    performance_method: PerformanceMethod = "Simple"


class PortfolioUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    external_identifier: Optional[str] = None
    base_currency: Optional[str] = None
    tax_residency: Optional[str] = None
    financial_year_end: Optional[str] = None
    performance_method: Optional[PerformanceMethod] = None


class PortfolioSchema(BaseModel):
    id: str
    name: str
    description: Optional[str]
    external_identifier: Optional[str]
    base_currency: str
    tax_residency: str
    financial_year_end: str
    performance_method: str
    created_at: datetime

    class Config:
        from_attributes = True


class PortfolioMetricsSchema(BaseModel):
    total_value: Decimal
    total_cost: Decimal
    total_gain: Decimal
    total_gain_percent: Decimal
    dividend_yield: Decimal
    holdings_count: int

    class Config:
        from_attributes = True


class PortfolioWithMetricsSchema(PortfolioSchema, PortfolioMetricsSchema):
    pass


class HoldingSchema(BaseModel):
    id: str
    portfolio_id: str
    symbol: str
    company_name: str
    exchange: str
    currency: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Optional[Decimal]
    last_updated: datetime

    class Config:
        from_attributes = True


class QuoteSchema(BaseModel):
    symbol: str
    price: Decimal
    change: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    volume: Optional[int] = None
    market_cap: Optional[Decimal] = None
    last_updated: datetime

    class Config:
        from_attributes = True


class HoldingWithMetricsSchema(HoldingSchema):
    current_value: Decimal
    cost_basis: Decimal
    total_gain: Decimal
    total_gain_percent: Decimal
    market_data: Optional[QuoteSchema] = None


class HoldingUpdate(BaseModel):
    company_name: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None
    current_price: Optional[Decimal] = None


class TransactionCreate(BaseModel):
    symbol: str
    type: TransactionType
    quantity: Decimal
    price: Decimal
    currency: str
    exchange: str
    date: datetime
    fees: Decimal = Decimal("0")
    total_amount: Optional[Decimal] = None


class TransactionSchema(BaseModel):
    id: str
    portfolio_id: str
    symbol: str
    type: TransactionType
    quantity: Decimal
    price: Decimal
    total_amount: Decimal
    fees: Decimal
    currency: str
    exchange: str
    date: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class TransactionRecordedSchema(BaseModel):
    transaction: TransactionSchema
    outcome: str
    holding: Optional[HoldingSchema]


class RealizedGainSchema(BaseModel):
    symbol: str
    quantity_sold: Decimal
    proceeds: Decimal
    cost_of_sold: Decimal
    fees: Decimal
    realized_gain: Decimal

    class Config:
        from_attributes = True


class PriceRefreshSchema(BaseModel):
    portfolio_id: str
    updated: list[str]
    failed: list[str]
    refreshed_at: datetime


def _portfolio_with_metrics(summary: PortfolioSummary) -> PortfolioWithMetricsSchema:
    return PortfolioWithMetricsSchema(**asdict(summary.portfolio), **asdict(summary.metrics))


def _holding_with_metrics(view: HoldingView) -> HoldingWithMetricsSchema:
    return HoldingWithMetricsSchema(
        **asdict(view.holding),
        **asdict(view.metrics),
        market_data=QuoteSchema.model_validate(view.quote) if view.quote else None,
    )


# ---------- Portfolios ----------

@router.get("", response_model=list[PortfolioWithMetricsSchema])
def list_portfolios(service: PortfolioService = Depends(get_portfolio_service)):
    """All portfolios with their current metrics."""
    return [_portfolio_with_metrics(s) for s in service.list_portfolios()]


@router.post("", response_model=PortfolioSchema, status_code=201)
def create_portfolio(
    payload: PortfolioCreate,
    service: PortfolioService = Depends(get_portfolio_service),
):
    attributes = payload.model_dump(exclude={"name"})
    return service.create_portfolio(payload.name, **attributes)


@router.get("/{portfolio_id}", response_model=PortfolioWithMetricsSchema)
def get_portfolio(
    portfolio_id: str,
    service: PortfolioService = Depends(get_portfolio_service),
):
    return _portfolio_with_metrics(service.get_portfolio_summary(portfolio_id))


@router.patch("/{portfolio_id}", response_model=PortfolioSchema)
def update_portfolio(
    portfolio_id: str,
    payload: PortfolioUpdate,
    service: PortfolioService = Depends(get_portfolio_service),
):
    return service.update_portfolio(portfolio_id, payload.model_dump(exclude_unset=True))


@router.delete("/{portfolio_id}")
def delete_portfolio(
    portfolio_id: str,
    service: PortfolioService = Depends(get_portfolio_service),
) -> dict[str, str]:
    service.delete_portfolio(portfolio_id)
    return {"message": "Portfolio deleted successfully"}


@router.get("/{portfolio_id}/metrics", response_model=PortfolioMetricsSchema)
def get_portfolio_metrics(
    portfolio_id: str,
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Metrics from the prices currently stored on the holdings."""
    return service.portfolio_metrics(portfolio_id)


@router.get("/{portfolio_id}/realized-gains", response_model=list[RealizedGainSchema])
def get_realized_gains(
    portfolio_id: str,
    service: PortfolioService = Depends(get_portfolio_service),
):
    return [RealizedGainSchema.model_validate(g) for g in service.realized_gains(portfolio_id)]


@router.post("/{portfolio_id}/update-prices", response_model=PriceRefreshSchema)
def update_prices(
    portfolio_id: str,
    service: PortfolioService = Depends(get_portfolio_service),
):
    return service.refresh_prices(portfolio_id)


# ---------- Holdings ----------

@router.get("/{portfolio_id}/holdings", response_model=list[HoldingWithMetricsSchema])
def get_holdings(
    portfolio_id: str,
    service: PortfolioService = Depends(get_portfolio_service),
):
    return [_holding_with_metrics(v) for v in service.list_holdings(portfolio_id)]


@router.patch("/{portfolio_id}/holdings/{symbol}", response_model=HoldingSchema)
def update_holding(
    portfolio_id: str,
    symbol: str,
    payload: HoldingUpdate,
    service: PortfolioService = Depends(get_portfolio_service),
):
    return service.update_holding(portfolio_id, symbol, **payload.model_dump())


@router.post("/{portfolio_id}/holdings/rebuild", response_model=list[HoldingSchema])
def rebuild_holdings(
    portfolio_id: str,
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Replay the ledger into a fresh holdings projection."""
    return service.rebuild_holdings(portfolio_id)


# ---------- Transactions ----------

@router.get("/{portfolio_id}/transactions", response_model=list[TransactionSchema])
def get_transactions(
    portfolio_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Ledger entries, newest first."""
    return service.list_transactions(portfolio_id, limit=limit)


@router.post(
    "/{portfolio_id}/transactions",
    response_model=TransactionRecordedSchema,
    status_code=201,
)
def create_transaction(
    portfolio_id: str,
    payload: TransactionCreate,
    service: PortfolioService = Depends(get_portfolio_service),
):
    recorded = service.record_transaction(portfolio_id, NewTransaction(**payload.model_dump()))
    return TransactionRecordedSchema(
        transaction=TransactionSchema.model_validate(recorded.transaction),
        outcome=recorded.projection.outcome.value,
        holding=(
            HoldingSchema.model_validate(recorded.projection.holding)
            if recorded.projection.holding
            else None
        ),
    )
