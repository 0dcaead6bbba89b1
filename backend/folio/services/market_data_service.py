"""
Market data service.

Caches quotes and FX rates from a MarketDataProvider and refetches only once
cached data is older than its freshness window. When a refetch fails the
stale cached value is served instead.
"""
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple
import logging

from folio.core.config import settings
from folio.core.errors import MarketDataUnavailable
from folio.core.timeutils import utcnow
from folio.models import FxRate, InstrumentInfo, Quote
from folio.services.market_data import MarketDataProvider

logger = logging.getLogger(__name__)


class MarketDataService:
    def __init__(
        self,
        provider: MarketDataProvider,
        quote_max_age: Optional[timedelta] = None,
        fx_max_age: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.provider = provider
        self.quote_max_age = quote_max_age or timedelta(seconds=settings.QUOTE_FRESHNESS_SECONDS)
        self.fx_max_age = fx_max_age or timedelta(seconds=settings.FX_FRESHNESS_SECONDS)
        self.clock = clock
        self._quotes: Dict[str, Quote] = {}
        self._rates: Dict[Tuple[str, str], FxRate] = {}
        self._instruments: Dict[str, InstrumentInfo] = {}

    # ---------- Quotes ----------

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        cached = self._quotes.get(symbol)
        if cached and self._is_fresh(cached.last_updated, self.quote_max_age):
            return cached

        fetched = self.provider.fetch_quote(symbol)
        if fetched is not None:
            quote = replace(fetched, symbol=symbol, last_updated=self.clock())
            self._quotes[symbol] = quote
            return quote

        if cached:
            logger.warning(
                "Quote refresh failed for %s, serving cached price from %s",
                symbol,
                cached.last_updated.isoformat(),
            )
            return cached
        raise MarketDataUnavailable(f"Market data not found: {symbol}")

    def get_current_price(self, symbol: str) -> Optional[Decimal]:
        try:
            return self.get_quote(symbol).price
        except MarketDataUnavailable:
            return None

    def cached_quote(self, symbol: str) -> Optional[Quote]:
        """Last cached quote regardless of age; never fetches."""
        return self._quotes.get(symbol.upper())

    def seed_quote(self, quote: Quote) -> None:
        self._quotes[quote.symbol.upper()] = quote

    # ---------- FX ----------

    def get_rate(self, from_currency: str, to_currency: str) -> FxRate:
        key = (from_currency.upper(), to_currency.upper())
        if key[0] == key[1]:
            return FxRate(key[0], key[1], Decimal("1"), self.clock())

        cached = self._rates.get(key)
        if cached and self._is_fresh(cached.last_updated, self.fx_max_age):
            return cached

        rate = self.provider.fetch_fx_rate(*key)
        if rate is not None:
            fx = FxRate(key[0], key[1], rate, self.clock())
            self._rates[key] = fx
            return fx

        if cached:
            logger.warning(
                "FX refresh failed for %s/%s, serving cached rate from %s",
                key[0],
                key[1],
                cached.last_updated.isoformat(),
            )
            return cached
        raise MarketDataUnavailable(f"Currency rate not found: {key[0]}/{key[1]}")

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        return amount * self.get_rate(from_currency, to_currency).rate

    def seed_rate(self, rate: FxRate) -> None:
        self._rates[(rate.from_currency.upper(), rate.to_currency.upper())] = rate

    # ---------- Instruments ----------

    def lookup_instrument(self, symbol: str) -> Optional[InstrumentInfo]:
        symbol = symbol.upper()
        info = self._instruments.get(symbol)
        if info is None:
            info = self.provider.lookup_instrument(symbol)
            if info is not None:
                self._instruments[symbol] = info
        return info

    def search_instruments(self, query: str) -> List[InstrumentInfo]:
        return self.provider.search_instruments(query)

    def _is_fresh(self, last_updated: datetime, max_age: timedelta) -> bool:
        return self.clock() - last_updated <= max_age
