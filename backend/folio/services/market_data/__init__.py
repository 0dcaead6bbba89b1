from typing import Dict, Type
from folio.services.market_data.base import MarketDataProvider
from folio.services.market_data.static_provider import StaticProvider
from folio.services.market_data.yfinance_provider import YFinanceProvider
from folio.services.market_data.alpha_vantage_provider import AlphaVantageProvider

PROVIDERS: Dict[str, Type[MarketDataProvider]] = {
    "static": StaticProvider,
    "yfinance": YFinanceProvider,
    "alpha_vantage": AlphaVantageProvider,
}


def get_market_data_provider(name: str = "static") -> MarketDataProvider:
    """Factory to get provider instance."""
    provider_class = PROVIDERS.get(name)
    if not provider_class:
        raise ValueError(f"Unknown provider: {name}")

    return provider_class()
