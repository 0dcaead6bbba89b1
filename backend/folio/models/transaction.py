from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from folio.core.timeutils import utcnow


class TransactionType(str, Enum):
    """
    Ledger entry kinds.

    Only BUY and SELL move the holdings projection today. The rest are
    recorded in the ledger and reported as ledger-only by the projection.
    """

    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"
    SPLIT = "split"
    BONUS = "bonus"
    OPENING_BALANCE = "opening_balance"
    CONSOLIDATION = "consolidation"
    CANCELLATION = "cancellation"
    DEMERGER = "demerger"
    RETURN_OF_CAPITAL = "return_of_capital"

    @property
    def moves_holding(self) -> bool:
        return self in (TransactionType.BUY, TransactionType.SELL)


@dataclass(frozen=True)
class Transaction:
    """
    Immutable ledger entry.

    total_amount is advisory: it is taken as supplied (or quantity * price +
    fees when omitted at creation) and never re-derived.
    """

    id: str
    portfolio_id: str
    symbol: str
    type: TransactionType
    quantity: Decimal
    price: Decimal
    total_amount: Decimal
    currency: str
    exchange: str
    date: datetime
    fees: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class NewTransaction:
    """Transaction request before it has been assigned an id."""

    symbol: str
    type: TransactionType
    quantity: Decimal
    price: Decimal
    currency: str
    exchange: str
    date: datetime
    fees: Decimal = Decimal("0")
    total_amount: Optional[Decimal] = None

    def resolved_total(self) -> Decimal:
        if self.total_amount is not None:
            return self.total_amount
        return self.quantity * self.price + self.fees
