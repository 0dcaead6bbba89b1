"""
Metrics Calculator.

Pure derivations of display metrics from a snapshot of holdings, the ledger
and already-resolved prices. Never mutates holdings.

A holding without a current price is valued at zero, so an unpriced position
shows a -100% unrealized gain rather than raising.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from folio.models import Holding, Transaction, TransactionType

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class HoldingMetrics:
    current_value: Decimal
    cost_basis: Decimal
    total_gain: Decimal
    total_gain_percent: Decimal


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: Decimal
    total_cost: Decimal
    total_gain: Decimal
    total_gain_percent: Decimal
    dividend_yield: Decimal
    holdings_count: int


def percent_of(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator * 100, or 0 when the denominator is not positive."""
    if denominator <= ZERO:
        return ZERO
    return numerator / denominator * HUNDRED


def holding_metrics(holding: Holding, current_price: Optional[Decimal] = None) -> HoldingMetrics:
    price = current_price if current_price is not None else holding.current_price
    if price is None:
        price = ZERO

    current_value = price * holding.quantity
    cost_basis = holding.cost_basis
    total_gain = current_value - cost_basis
    return HoldingMetrics(
        current_value=current_value,
        cost_basis=cost_basis,
        total_gain=total_gain,
        total_gain_percent=percent_of(total_gain, cost_basis),
    )


def dividend_income(transactions: Iterable[Transaction]) -> Decimal:
    return sum(
        (t.total_amount for t in transactions if t.type is TransactionType.DIVIDEND),
        ZERO,
    )


def portfolio_metrics(
    holdings: Iterable[Holding],
    transactions: Iterable[Transaction],
    prices: Optional[Mapping[str, Decimal]] = None,
) -> PortfolioMetrics:
    """
    Aggregate holding metrics for one portfolio.

    ``prices`` overrides each holding's stored current price by symbol.
    Amounts are summed as-is; no currency conversion is applied.
    """
    holdings = tuple(holdings)
    prices = prices or {}

    total_value = ZERO
    total_cost = ZERO
    for holding in holdings:
        metrics = holding_metrics(holding, prices.get(holding.symbol))
        total_value += metrics.current_value
        total_cost += metrics.cost_basis

    total_gain = total_value - total_cost
    return PortfolioMetrics(
        total_value=total_value,
        total_cost=total_cost,
        total_gain=total_gain,
        total_gain_percent=percent_of(total_gain, total_cost),
        dividend_yield=percent_of(dividend_income(transactions), total_value),
        holdings_count=len(holdings),
    )
