from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from folio.models import InstrumentInfo, Quote


class MarketDataProvider(ABC):
    """Abstract base class for price, FX and instrument metadata providers."""

    @abstractmethod
    def fetch_quote(self, symbol: str) -> Optional[Quote]:
        """Fetch the latest quote for a symbol, or None if unavailable."""
        pass

    @abstractmethod
    def fetch_fx_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        """Fetch units of ``to_currency`` per one unit of ``from_currency``."""
        pass

    @abstractmethod
    def lookup_instrument(self, symbol: str) -> Optional[InstrumentInfo]:
        """Fetch display metadata (company name, exchange) for a symbol."""
        pass

    @abstractmethod
    def search_instruments(self, query: str) -> List[InstrumentInfo]:
        pass
