from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

from folio.core.timeutils import utcnow

PerformanceMethod = Literal["Simple", "TWRR"]


@dataclass(frozen=True)
class Portfolio:
    """A named collection of holdings with its own ledger."""

    id: str
    name: str
    description: Optional[str] = None
    external_identifier: Optional[str] = None
    base_currency: str = "USD"
    tax_residency: str = "US"
    financial_year_end: str = "31st Mar"
    performance_method: PerformanceMethod = "Simple"
    created_at: datetime = field(default_factory=utcnow)
