import yfinance as yf
from folio.models import InstrumentInfo, Quote
from folio.services.market_data.base import MarketDataProvider
from decimal import Decimal
from typing import Any, List, Optional
import pandas as pd
import logging

logger = logging.getLogger(__name__)

# yfinance quoteType -> instrument type used on holdings
QUOTE_TYPES = {
    "EQUITY": "STK",
    "ETF": "STK",
    "MUTUALFUND": "MF",
    "BOND": "FIXED",
}


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or pd.isna(value):
        return None
    return Decimal(str(value))


class YFinanceProvider(MarketDataProvider):
    """yfinance provider for delayed quotes, FX rates and instrument metadata."""

    def fetch_quote(self, symbol: str) -> Optional[Quote]:
        # No reliable realtime endpoint; the last two daily bars give us
        # the latest close and the change against the previous one.
        try:
            hist = yf.Ticker(symbol).history(period="2d")
        except Exception as e:
            logger.error(f"yfinance history failed for {symbol}: {e}")
            return None
        if hist.empty:
            return None

        last_row = hist.iloc[-1]
        price = _to_decimal(last_row["Close"])
        if price is None:
            return None

        change = None
        change_percent = None
        if len(hist) > 1:
            prev_close = _to_decimal(hist.iloc[-2]["Close"])
            if prev_close:
                change = price - prev_close
                change_percent = change / prev_close * 100

        volume = last_row.get("Volume")
        return Quote(
            symbol=symbol.upper(),
            price=price,
            change=change,
            change_percent=change_percent,
            volume=None if volume is None or pd.isna(volume) else int(volume),
        )

    def fetch_fx_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        pair = f"{from_currency.upper()}{to_currency.upper()}=X"
        try:
            hist = yf.Ticker(pair).history(period="5d")
        except Exception as e:
            logger.error(f"yfinance history failed for {pair}: {e}")
            return None
        if hist.empty:
            logger.warning(f"No FX data for {pair} in yfinance response")
            return None
        return _to_decimal(hist.iloc[-1]["Close"])

    def lookup_instrument(self, symbol: str) -> Optional[InstrumentInfo]:
        try:
            info = yf.Ticker(symbol).get_info()
        except Exception as e:
            logger.error(f"yfinance info failed for {symbol}: {e}")
            return None
        if not info:
            logger.warning("yfinance returned no info for %s", symbol)
            return None

        return InstrumentInfo(
            symbol=symbol.upper(),
            name=info.get("longName") or info.get("shortName"),
            exchange=info.get("exchange"),
            currency=info.get("currency"),
            instrument_type=QUOTE_TYPES.get(str(info.get("quoteType", "")).upper(), "OTH"),
        )

    def search_instruments(self, query: str) -> List[InstrumentInfo]:
        if not query.strip():
            return []
        try:
            quotes = yf.Search(query, max_results=10).quotes
        except Exception as e:
            logger.error(f"yfinance search failed for {query!r}: {e}")
            return []

        return [
            InstrumentInfo(
                symbol=str(q["symbol"]).upper(),
                name=q.get("longname") or q.get("shortname"),
                exchange=q.get("exchange"),
                instrument_type=QUOTE_TYPES.get(str(q.get("quoteType", "")).upper(), "OTH"),
            )
            for q in quotes
            if q.get("symbol")
        ]
