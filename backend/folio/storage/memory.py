import logging
from typing import Optional

from folio.models import Holding, Portfolio, Transaction
from folio.storage.base import LedgerStore

logger = logging.getLogger(__name__)


class InMemoryLedgerStore(LedgerStore):
    """Process-local store. Contents are lost when the store is closed."""

    def __init__(self) -> None:
        self._portfolios: dict[str, Portfolio] = {}
        self._holdings: dict[tuple[str, str], Holding] = {}
        self._transactions: dict[str, list[Transaction]] = {}

    def list_portfolios(self) -> tuple[Portfolio, ...]:
        return tuple(self._portfolios.values())

    def get_portfolio(self, portfolio_id: str) -> Optional[Portfolio]:
        return self._portfolios.get(portfolio_id)

    def save_portfolio(self, portfolio: Portfolio) -> None:
        self._portfolios[portfolio.id] = portfolio
        self._transactions.setdefault(portfolio.id, [])

    def delete_portfolio(self, portfolio_id: str) -> bool:
        if self._portfolios.pop(portfolio_id, None) is None:
            return False
        for key in [k for k in self._holdings if k[0] == portfolio_id]:
            del self._holdings[key]
        self._transactions.pop(portfolio_id, None)
        return True

    def get_holding(self, portfolio_id: str, symbol: str) -> Optional[Holding]:
        return self._holdings.get((portfolio_id, symbol))

    def list_holdings(self, portfolio_id: str) -> tuple[Holding, ...]:
        return tuple(h for (pid, _), h in self._holdings.items() if pid == portfolio_id)

    def save_holding(self, holding: Holding) -> None:
        self._holdings[(holding.portfolio_id, holding.symbol)] = holding

    def delete_holding(self, portfolio_id: str, symbol: str) -> bool:
        return self._holdings.pop((portfolio_id, symbol), None) is not None

    def append_transaction(self, transaction: Transaction) -> None:
        self._transactions.setdefault(transaction.portfolio_id, []).append(transaction)

    def list_transactions(self, portfolio_id: str) -> tuple[Transaction, ...]:
        return tuple(self._transactions.get(portfolio_id, ()))

    def close(self) -> None:
        logger.info(
            "Discarding in-memory ledger: %d portfolios, %d holdings",
            len(self._portfolios),
            len(self._holdings),
        )
        self._portfolios.clear()
        self._holdings.clear()
        self._transactions.clear()
