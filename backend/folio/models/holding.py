from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from folio.core.timeutils import utcnow


@dataclass(frozen=True)
class Holding:
    """
    Current position in one instrument within one portfolio.

    A projection of the ledger, not independently authoritative. Records are
    replaced whole on every change, so a reference held by a reader is a
    consistent snapshot.
    """

    id: str
    portfolio_id: str
    symbol: str
    company_name: str
    exchange: str
    currency: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Optional[Decimal] = None
    last_updated: datetime = field(default_factory=utcnow)

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.average_cost
