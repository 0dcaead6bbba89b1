import logging
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

import httpx

from folio.core.config import settings
from folio.models import InstrumentInfo, Quote
from folio.services.market_data.base import MarketDataProvider

logger = logging.getLogger(__name__)

# SYMBOL_SEARCH "3. type" -> instrument type used on holdings
SEARCH_TYPES = {
    "equity": "STK",
    "etf": "STK",
    "mutual fund": "MF",
}


class AlphaVantageProvider(MarketDataProvider):
    """Alpha Vantage REST provider (GLOBAL_QUOTE, CURRENCY_EXCHANGE_RATE, SYMBOL_SEARCH)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key or settings.ALPHA_VANTAGE_API_KEY
        self.base_url = base_url or settings.ALPHA_VANTAGE_BASE_URL
        self.client = client or httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS)

    def fetch_quote(self, symbol: str) -> Optional[Quote]:
        data = self._query({"function": "GLOBAL_QUOTE", "symbol": symbol})
        quote = (data or {}).get("Global Quote")
        if not quote:
            logger.warning("Alpha Vantage returned no quote for %s", symbol)
            return None

        price = _to_decimal(quote.get("05. price"))
        if price is None:
            return None
        return Quote(
            symbol=symbol.upper(),
            price=price,
            change=_to_decimal(quote.get("09. change")),
            change_percent=_to_decimal(str(quote.get("10. change percent", "")).rstrip("%")),
            volume=_to_int(quote.get("06. volume")),
        )

    def fetch_fx_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        data = self._query(
            {
                "function": "CURRENCY_EXCHANGE_RATE",
                "from_currency": from_currency.upper(),
                "to_currency": to_currency.upper(),
            }
        )
        payload = (data or {}).get("Realtime Currency Exchange Rate")
        if not payload:
            logger.warning(
                "Alpha Vantage returned no rate for %s/%s", from_currency, to_currency
            )
            return None
        return _to_decimal(payload.get("5. Exchange Rate"))

    def lookup_instrument(self, symbol: str) -> Optional[InstrumentInfo]:
        wanted = symbol.upper()
        for info in self.search_instruments(symbol):
            if info.symbol == wanted:
                return info
        return None

    def search_instruments(self, query: str) -> List[InstrumentInfo]:
        if not query.strip():
            return []
        data = self._query({"function": "SYMBOL_SEARCH", "keywords": query})
        matches = (data or {}).get("bestMatches") or []
        return [
            InstrumentInfo(
                symbol=str(m.get("1. symbol", "")).upper(),
                name=m.get("2. name"),
                exchange=m.get("4. region"),
                currency=m.get("8. currency"),
                instrument_type=SEARCH_TYPES.get(str(m.get("3. type", "")).lower(), "OTH"),
            )
            for m in matches
            if m.get("1. symbol")
        ]

    def close(self) -> None:
        self.client.close()

    def _query(self, params: dict[str, str]) -> Optional[dict[str, Any]]:
        try:
            response = self.client.get(
                self.base_url, params={**params, "apikey": self.api_key}
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Alpha Vantage %s request failed: %s", params.get("function"), exc)
            return None

        if not isinstance(data, dict):
            return None
        # Throttled or invalid-key responses come back as 200 with a note
        for key in ("Note", "Information", "Error Message"):
            if key in data:
                logger.warning("Alpha Vantage %s: %s", params.get("function"), data[key])
                return None
        return data


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
