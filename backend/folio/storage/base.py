from abc import ABC, abstractmethod
from typing import Optional

from folio.models import Holding, Portfolio, Transaction


class LedgerStore(ABC):
    """
    Abstract storage for portfolios, their transaction ledgers and the
    holdings projection.

    Holdings are keyed by (portfolio_id, symbol), so at most one record can
    exist per key. Collections are returned as tuples of immutable records.
    """

    # Portfolios

    @abstractmethod
    def list_portfolios(self) -> tuple[Portfolio, ...]:
        pass

    @abstractmethod
    def get_portfolio(self, portfolio_id: str) -> Optional[Portfolio]:
        pass

    @abstractmethod
    def save_portfolio(self, portfolio: Portfolio) -> None:
        """Insert or replace a portfolio record."""
        pass

    @abstractmethod
    def delete_portfolio(self, portfolio_id: str) -> bool:
        """Remove a portfolio along with its holdings and ledger."""
        pass

    # Holdings

    @abstractmethod
    def get_holding(self, portfolio_id: str, symbol: str) -> Optional[Holding]:
        pass

    @abstractmethod
    def list_holdings(self, portfolio_id: str) -> tuple[Holding, ...]:
        pass

    @abstractmethod
    def save_holding(self, holding: Holding) -> None:
        """Insert or replace the holding for its (portfolio_id, symbol)."""
        pass

    @abstractmethod
    def delete_holding(self, portfolio_id: str, symbol: str) -> bool:
        pass

    # Transactions

    @abstractmethod
    def append_transaction(self, transaction: Transaction) -> None:
        pass

    @abstractmethod
    def list_transactions(self, portfolio_id: str) -> tuple[Transaction, ...]:
        """Ledger for a portfolio in append order."""
        pass

    def close(self) -> None:
        """Release resources held by the store."""
        pass
