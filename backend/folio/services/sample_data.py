"""
Demo portfolios for a fresh in-memory store.

Holdings are built by recording buy transactions through the projection,
then priced from seeded quotes, so the demo ledger and holdings agree.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from folio.models import FxRate, InstrumentInfo, NewTransaction, Quote, TransactionType
from folio.services.market_data import StaticProvider
from folio.services.portfolio_service import PortfolioService

logger = logging.getLogger(__name__)

SAMPLE_INSTRUMENTS = {
    "AAPL": InstrumentInfo("AAPL", "Apple Inc.", "NASDAQ", "USD", "STK"),
    "MSFT": InstrumentInfo("MSFT", "Microsoft Corporation", "NASDAQ", "USD", "STK"),
    "ASML": InstrumentInfo("ASML", "ASML Holding N.V.", "AEX", "EUR", "STK"),
}

SAMPLE_PRICES = {
    "AAPL": Decimal("175.50"),
    "MSFT": Decimal("310.25"),
    "ASML": Decimal("620.50"),
}

SAMPLE_RATES = {
    ("USD", "EUR"): Decimal("0.8473"),
    ("EUR", "USD"): Decimal("1.1801"),
}


def seed_sample_data(service: PortfolioService) -> None:
    now = service.clock()
    market_data = service.market_data
    for symbol, price in SAMPLE_PRICES.items():
        market_data.seed_quote(Quote(symbol=symbol, price=price, last_updated=now))
    for (from_ccy, to_ccy), rate in SAMPLE_RATES.items():
        market_data.seed_rate(FxRate(from_ccy, to_ccy, rate, now))

    us = service.create_portfolio(
        "US Growth Portfolio",
        description="Technology and growth stocks in US markets",
        financial_year_end="31st Dec",
    )
    intl = service.create_portfolio(
        "International Diversified",
        description="Global diversification across developed markets",
        performance_method="TWRR",
    )

    buys = [
        (us.id, "AAPL", "50", "150.00", "9.99", 30),
        (us.id, "MSFT", "25", "280.00", "9.99", 15),
        (intl.id, "ASML", "10", "580.00", "0", 45),
    ]
    for portfolio_id, symbol, qty, price, fees, days_ago in buys:
        info = SAMPLE_INSTRUMENTS[symbol]
        service.record_transaction(
            portfolio_id,
            NewTransaction(
                symbol=symbol,
                type=TransactionType.BUY,
                quantity=Decimal(qty),
                price=Decimal(price),
                fees=Decimal(fees),
                # Demo ledger records the gross trade value without fees
                total_amount=Decimal(qty) * Decimal(price),
                currency=info.currency,
                exchange=info.exchange,
                date=now - timedelta(days=days_ago),
            ),
            enrich=False,
        )
        service.update_holding(portfolio_id, symbol, company_name=info.name)

    for portfolio in (us, intl):
        service.refresh_prices(portfolio.id)

    logger.info("Seeded sample portfolios: %s, %s", us.name, intl.name)


def sample_provider() -> StaticProvider:
    """Static provider serving the demo prices, rates and instrument names."""
    return StaticProvider(
        prices=SAMPLE_PRICES,
        rates=SAMPLE_RATES,
        instruments=SAMPLE_INSTRUMENTS,
    )
