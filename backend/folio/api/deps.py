from fastapi import Request

from folio.services.market_data_service import MarketDataService
from folio.services.portfolio_service import PortfolioService


def get_portfolio_service(request: Request) -> PortfolioService:
    """Service built at application startup."""
    return request.app.state.portfolio_service


def get_market_data_service(request: Request) -> MarketDataService:
    return request.app.state.portfolio_service.market_data
