"""Shared fixtures: fixed clocks, transaction builders and wired services."""
from datetime import datetime, timedelta
from decimal import Decimal
import itertools

import pytest

from folio.accounting import HoldingProjector
from folio.models import Transaction, TransactionType
from folio.services.market_data import StaticProvider
from folio.services.market_data_service import MarketDataService
from folio.services.portfolio_service import PortfolioService
from folio.storage import InMemoryLedgerStore

PORTFOLIO_ID = "pf-1"
START = datetime(2024, 1, 2, 9, 30)


class FakeClock:
    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_txn():
    """Build ledger transactions with sequential ids, recording times and trade dates."""
    counter = itertools.count(1)

    def _make(
        type="buy",
        quantity="10",
        price="100",
        symbol="AAPL",
        portfolio_id=PORTFOLIO_ID,
        fees="0",
        total_amount=None,
        currency="USD",
        exchange="NASDAQ",
        date=None,
    ) -> Transaction:
        n = next(counter)
        quantity, price, fees = Decimal(quantity), Decimal(price), Decimal(fees)
        return Transaction(
            id=f"txn-{n}",
            portfolio_id=portfolio_id,
            symbol=symbol,
            type=TransactionType(type),
            quantity=quantity,
            price=price,
            total_amount=(
                Decimal(total_amount) if total_amount is not None else quantity * price + fees
            ),
            fees=fees,
            currency=currency,
            exchange=exchange,
            date=date or START + timedelta(days=n),
            created_at=START + timedelta(days=n),
        )

    return _make


@pytest.fixture
def store():
    return InMemoryLedgerStore()


@pytest.fixture
def projector(store, clock):
    ids = itertools.count(1)
    return HoldingProjector(store, clock=clock, id_factory=lambda: f"h-{next(ids)}")


@pytest.fixture
def provider():
    return StaticProvider(
        prices={"AAPL": Decimal("175.50"), "MSFT": Decimal("310.25")},
        rates={("USD", "EUR"): Decimal("0.8473"), ("EUR", "USD"): Decimal("1.1801")},
    )


@pytest.fixture
def market_data(provider, clock):
    return MarketDataService(provider, clock=clock)


@pytest.fixture
def service(store, market_data, clock):
    return PortfolioService(store, market_data, oversell_policy="close", clock=clock)
