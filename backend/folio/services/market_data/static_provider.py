from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from folio.models import InstrumentInfo, Quote
from folio.services.market_data.base import MarketDataProvider


class StaticProvider(MarketDataProvider):
    """Serves fixed prices and rates. Used for the demo store and tests."""

    def __init__(
        self,
        prices: Optional[Dict[str, Decimal]] = None,
        rates: Optional[Dict[Tuple[str, str], Decimal]] = None,
        instruments: Optional[Dict[str, InstrumentInfo]] = None,
    ) -> None:
        self.prices: Dict[str, Decimal] = dict(prices or {})
        self.rates: Dict[Tuple[str, str], Decimal] = dict(rates or {})
        self.instruments: Dict[str, InstrumentInfo] = dict(instruments or {})

    def fetch_quote(self, symbol: str) -> Optional[Quote]:
        price = self.prices.get(symbol.upper())
        if price is None:
            return None
        return Quote(symbol=symbol.upper(), price=price)

    def fetch_fx_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        return self.rates.get((from_currency.upper(), to_currency.upper()))

    def lookup_instrument(self, symbol: str) -> Optional[InstrumentInfo]:
        return self.instruments.get(symbol.upper())

    def search_instruments(self, query: str) -> List[InstrumentInfo]:
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            info
            for info in self.instruments.values()
            if needle in info.symbol.lower() or needle in (info.name or "").lower()
        ]
