"""
Realized gain aggregation.

A separate replay of the ledger using the same weighted-average cost method
as the projection. Sells lock in (sell price - average cost) per unit, less
the sell's fees. Units sold beyond the quantity held realize nothing.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from folio.accounting.projection import weighted_average_cost
from folio.models import Transaction, TransactionType

ZERO = Decimal("0")


@dataclass(frozen=True)
class RealizedGain:
    symbol: str
    quantity_sold: Decimal
    proceeds: Decimal
    cost_of_sold: Decimal
    fees: Decimal

    @property
    def realized_gain(self) -> Decimal:
        return self.proceeds - self.cost_of_sold - self.fees


@dataclass
class _Position:
    quantity: Decimal = ZERO
    average_cost: Decimal = ZERO
    quantity_sold: Decimal = ZERO
    proceeds: Decimal = ZERO
    cost_of_sold: Decimal = ZERO
    fees: Decimal = ZERO


def realized_gains(transactions: Iterable[Transaction]) -> dict[str, RealizedGain]:
    """
    Realized P&L per symbol for the ledger of a single portfolio, replayed in
    recorded order like the holdings projection.
    """
    positions: dict[str, _Position] = {}

    for txn in transactions:
        if txn.type is TransactionType.BUY:
            pos = positions.setdefault(txn.symbol, _Position())
            pos.average_cost = weighted_average_cost(
                pos.quantity, pos.average_cost, txn.quantity, txn.price
            )
            pos.quantity += txn.quantity
        elif txn.type is TransactionType.SELL:
            pos = positions.get(txn.symbol)
            if pos is None or pos.quantity <= ZERO:
                continue
            sold = min(txn.quantity, pos.quantity)
            pos.quantity_sold += sold
            pos.proceeds += sold * txn.price
            pos.cost_of_sold += sold * pos.average_cost
            pos.fees += txn.fees
            pos.quantity -= sold
            if pos.quantity <= ZERO:
                pos.quantity = ZERO
                pos.average_cost = ZERO

    return {
        symbol: RealizedGain(
            symbol=symbol,
            quantity_sold=pos.quantity_sold,
            proceeds=pos.proceeds,
            cost_of_sold=pos.cost_of_sold,
            fees=pos.fees,
        )
        for symbol, pos in positions.items()
        if pos.quantity_sold > ZERO
    }
