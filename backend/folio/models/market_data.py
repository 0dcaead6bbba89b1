from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from folio.core.timeutils import utcnow


@dataclass(frozen=True)
class Quote:
    """Latest traded price for a symbol."""

    symbol: str
    price: Decimal
    change: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    volume: Optional[int] = None
    market_cap: Optional[Decimal] = None
    last_updated: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class FxRate:
    from_currency: str
    to_currency: str
    rate: Decimal
    last_updated: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class InstrumentInfo:
    """Display metadata used to enrich holdings."""

    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None
    instrument_type: Optional[str] = None  # "STK", "MF", "FIXED", "OTH"
