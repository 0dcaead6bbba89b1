"""
FastAPI application entry point.

Main API server for the Folio portfolio tracker.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from folio.core.config import settings
from folio.core.errors import (
    FolioError,
    HoldingNotFound,
    InvalidTransaction,
    MarketDataUnavailable,
    OversellError,
    PortfolioNotFound,
    UnknownHolding,
)
from folio.core.logging import setup_logging
from folio.services.market_data import get_market_data_provider
from folio.services.market_data_service import MarketDataService
from folio.services.portfolio_service import PortfolioService
from folio.services.sample_data import sample_provider, seed_sample_data
from folio.storage import InMemoryLedgerStore

# Setup logging
setup_logging()

ERROR_STATUS = {
    PortfolioNotFound: 404,
    HoldingNotFound: 404,
    MarketDataUnavailable: 404,
    InvalidTransaction: 422,
    OversellError: 422,
    UnknownHolding: 422,
}


def build_portfolio_service() -> PortfolioService:
    """Construct the store, market data and portfolio services for one process."""
    if settings.MARKET_DATA_PROVIDER == "static":
        provider = sample_provider()
    else:
        provider = get_market_data_provider(settings.MARKET_DATA_PROVIDER)

    service = PortfolioService(InMemoryLedgerStore(), MarketDataService(provider))
    if settings.SEED_SAMPLE_DATA:
        seed_sample_data(service)
    return service


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Portfolio tracker - transaction ledger, holdings and performance metrics",
        debug=settings.DEBUG,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup() -> None:
        """Run on application startup."""
        app.state.portfolio_service = build_portfolio_service()

    @app.on_event("shutdown")
    async def shutdown() -> None:
        """Run on application shutdown."""
        service = app.state.portfolio_service
        service.store.close()
        close_provider = getattr(service.market_data.provider, "close", None)
        if close_provider is not None:
            close_provider()

    @app.exception_handler(FolioError)
    async def folio_error_handler(request: Request, exc: FolioError) -> JSONResponse:
        status_code = ERROR_STATUS.get(type(exc), 400)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    from folio.api.portfolio import router as portfolio_router
    from folio.api.market import router as market_router

    app.include_router(portfolio_router, prefix="/api/v1/portfolios", tags=["portfolios"])
    app.include_router(market_router, prefix="/api/v1", tags=["market-data"])

    return app


app = create_app()
