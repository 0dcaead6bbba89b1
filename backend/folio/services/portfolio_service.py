"""
Portfolio service.

Coordinates the ledger store, the holdings projection and market data for
the API. Mutations are serialized per portfolio; reads compute metrics from
an immutable snapshot of the holdings.
"""
import logging
import threading
import uuid
from dataclasses import dataclass, fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional

from folio.accounting import (
    HoldingMetrics,
    HoldingProjector,
    OversellPolicy,
    PortfolioMetrics,
    ProjectionOutcome,
    ProjectionResult,
    RealizedGain,
    holding_metrics,
    portfolio_metrics,
    realized_gains,
    rebuild_holdings,
)
from folio.core.config import settings
from folio.core.errors import HoldingNotFound, PortfolioNotFound
from folio.core.timeutils import as_naive_utc, utcnow
from folio.models import (
    Holding,
    NewTransaction,
    Portfolio,
    Quote,
    Transaction,
    TransactionType,
)
from folio.services.market_data_service import MarketDataService
from folio.storage import LedgerStore

logger = logging.getLogger(__name__)

# Portfolio fields that can be changed after creation
UPDATABLE_PORTFOLIO_FIELDS = {
    f.name for f in fields(Portfolio) if f.name not in ("id", "created_at")
}

# Fields that may be cleared by an update; null for any other field is ignored
NULLABLE_PORTFOLIO_FIELDS = {"description", "external_identifier"}


@dataclass(frozen=True)
class PortfolioSummary:
    portfolio: Portfolio
    metrics: PortfolioMetrics


@dataclass(frozen=True)
class HoldingView:
    holding: Holding
    metrics: HoldingMetrics
    quote: Optional[Quote] = None


@dataclass(frozen=True)
class RecordedTransaction:
    transaction: Transaction
    projection: ProjectionResult


class PortfolioService:
    def __init__(
        self,
        store: LedgerStore,
        market_data: MarketDataService,
        oversell_policy: Optional[OversellPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.market_data = market_data
        self.clock = clock
        self.projector = HoldingProjector(
            store,
            oversell_policy=oversell_policy or settings.OVERSELL_POLICY,
            clock=clock,
        )
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, portfolio_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(portfolio_id)
            if lock is None:
                lock = self._locks[portfolio_id] = threading.Lock()
            return lock

    # ---------- Portfolios ----------

    def get_portfolio(self, portfolio_id: str) -> Portfolio:
        portfolio = self.store.get_portfolio(portfolio_id)
        if portfolio is None:
            raise PortfolioNotFound(portfolio_id)
        return portfolio

    def list_portfolios(self) -> List[PortfolioSummary]:
        return [
            PortfolioSummary(p, self.portfolio_metrics(p.id))
            for p in self.store.list_portfolios()
        ]

    def get_portfolio_summary(self, portfolio_id: str) -> PortfolioSummary:
        portfolio = self.get_portfolio(portfolio_id)
        return PortfolioSummary(portfolio, self.portfolio_metrics(portfolio_id))

    def create_portfolio(self, name: str, **attributes: Any) -> Portfolio:
        unknown = set(attributes) - UPDATABLE_PORTFOLIO_FIELDS
        if unknown:
            raise ValueError(f"Unknown portfolio fields: {sorted(unknown)}")
        portfolio = Portfolio(
            id=str(uuid.uuid4()),
            name=name,
            created_at=self.clock(),
            **{k: v for k, v in attributes.items() if v is not None},
        )
        self.store.save_portfolio(portfolio)
        logger.info("Created portfolio %s (%s)", portfolio.id, portfolio.name)
        return portfolio

    def update_portfolio(self, portfolio_id: str, changes: Mapping[str, Any]) -> Portfolio:
        unknown = set(changes) - UPDATABLE_PORTFOLIO_FIELDS
        if unknown:
            raise ValueError(f"Unknown portfolio fields: {sorted(unknown)}")
        changes = {
            k: v for k, v in changes.items() if v is not None or k in NULLABLE_PORTFOLIO_FIELDS
        }
        with self._lock_for(portfolio_id):
            updated = replace(self.get_portfolio(portfolio_id), **changes)
            self.store.save_portfolio(updated)
        return updated

    def delete_portfolio(self, portfolio_id: str) -> None:
        with self._lock_for(portfolio_id):
            if not self.store.delete_portfolio(portfolio_id):
                raise PortfolioNotFound(portfolio_id)
        with self._locks_guard:
            self._locks.pop(portfolio_id, None)
        logger.info("Deleted portfolio %s", portfolio_id)

    # ---------- Transactions ----------

    def record_transaction(
        self, portfolio_id: str, request: NewTransaction, enrich: bool = True
    ) -> RecordedTransaction:
        """
        Validate a transaction, project it onto the holdings and append it
        to the ledger. Nothing is written if the projection rejects it.

        The trade date is stored as naive UTC. Instrument metadata for a
        possible new holding is looked up before the portfolio lock is taken.
        """
        symbol = request.symbol.strip().upper()
        info = None
        if (
            enrich
            and request.type is TransactionType.BUY
            and self.store.get_holding(portfolio_id, symbol) is None
        ):
            info = self.market_data.lookup_instrument(symbol)

        with self._lock_for(portfolio_id):
            self.get_portfolio(portfolio_id)
            transaction = Transaction(
                id=str(uuid.uuid4()),
                portfolio_id=portfolio_id,
                symbol=symbol,
                type=request.type,
                quantity=request.quantity,
                price=request.price,
                total_amount=request.resolved_total(),
                fees=request.fees,
                currency=request.currency.strip().upper(),
                exchange=request.exchange.strip().upper(),
                date=as_naive_utc(request.date),
                created_at=self.clock(),
            )

            result = self.projector.preview(transaction)
            if result.outcome is ProjectionOutcome.CREATED and info is not None and info.name:
                result = ProjectionResult(
                    result.outcome, replace(result.holding, company_name=info.name)
                )
            self.projector.commit(transaction, result)
            self.store.append_transaction(transaction)

        logger.info(
            "Recorded %s %s %s @ %s in %s -> %s",
            transaction.type.value,
            transaction.quantity,
            transaction.symbol,
            transaction.price,
            portfolio_id,
            result.outcome.value,
        )
        return RecordedTransaction(transaction, result)

    def list_transactions(
        self, portfolio_id: str, limit: Optional[int] = None
    ) -> List[Transaction]:
        """Ledger entries newest first by trade date."""
        self.get_portfolio(portfolio_id)
        transactions = sorted(
            self.store.list_transactions(portfolio_id),
            key=lambda t: (t.date, t.created_at),
            reverse=True,
        )
        return transactions[:limit] if limit is not None else transactions

    def recent_transactions(self, portfolio_id: str) -> List[Transaction]:
        return self.list_transactions(portfolio_id, limit=settings.RECENT_TRANSACTIONS_LIMIT)

    def realized_gains(self, portfolio_id: str) -> List[RealizedGain]:
        self.get_portfolio(portfolio_id)
        gains = realized_gains(self.store.list_transactions(portfolio_id))
        return [gains[symbol] for symbol in sorted(gains)]

    # ---------- Holdings ----------

    def list_holdings(self, portfolio_id: str) -> List[HoldingView]:
        self.get_portfolio(portfolio_id)
        return [
            HoldingView(h, holding_metrics(h), self.market_data.cached_quote(h.symbol))
            for h in sorted(self.store.list_holdings(portfolio_id), key=lambda h: h.symbol)
        ]

    def get_holding(self, portfolio_id: str, symbol: str) -> Holding:
        holding = self.store.get_holding(portfolio_id, symbol.upper())
        if holding is None:
            raise HoldingNotFound(portfolio_id, symbol)
        return holding

    def update_holding(
        self,
        portfolio_id: str,
        symbol: str,
        company_name: Optional[str] = None,
        exchange: Optional[str] = None,
        currency: Optional[str] = None,
        current_price: Optional[Decimal] = None,
    ) -> Holding:
        """
        Edit display metadata or the current price of a holding. Quantity and
        average cost only change through transactions.
        """
        changes: Dict[str, Any] = {
            k: v
            for k, v in {
                "company_name": company_name,
                "exchange": exchange,
                "currency": currency,
                "current_price": current_price,
            }.items()
            if v is not None
        }
        with self._lock_for(portfolio_id):
            self.get_portfolio(portfolio_id)
            holding = replace(
                self.get_holding(portfolio_id, symbol), last_updated=self.clock(), **changes
            )
            self.store.save_holding(holding)
        return holding

    def refresh_prices(self, portfolio_id: str) -> Dict[str, Any]:
        """Pull current prices for every symbol held and store them on the holdings."""
        self.get_portfolio(portfolio_id)
        symbols = sorted({h.symbol for h in self.store.list_holdings(portfolio_id)})
        updated: List[str] = []
        failed: List[str] = []

        for symbol in symbols:
            price = self.market_data.get_current_price(symbol)
            if price is None:
                logger.warning("No price available for %s", symbol)
                failed.append(symbol)
                continue
            with self._lock_for(portfolio_id):
                holding = self.store.get_holding(portfolio_id, symbol)
                # Closed while we were fetching
                if holding is None:
                    continue
                self.store.save_holding(
                    replace(holding, current_price=price, last_updated=self.clock())
                )
            updated.append(symbol)

        return {
            "portfolio_id": portfolio_id,
            "updated": updated,
            "failed": failed,
            "refreshed_at": self.clock().isoformat(),
        }

    def rebuild_holdings(self, portfolio_id: str) -> List[Holding]:
        """
        Replace the holdings projection with a fresh replay of the ledger.
        Display metadata and current prices carry over for positions that
        are still open.
        """
        with self._lock_for(portfolio_id):
            self.get_portfolio(portfolio_id)
            existing = {h.symbol: h for h in self.store.list_holdings(portfolio_id)}
            replayed = rebuild_holdings(
                self.store.list_transactions(portfolio_id),
                oversell_policy=self.projector.oversell_policy,
                clock=self.clock,
            )

            for symbol in existing:
                self.store.delete_holding(portfolio_id, symbol)
            rebuilt: List[Holding] = []
            for (_, symbol), holding in sorted(replayed.items()):
                previous = existing.get(symbol)
                if previous is not None:
                    holding = replace(
                        holding,
                        id=previous.id,
                        company_name=previous.company_name,
                        current_price=previous.current_price,
                    )
                self.store.save_holding(holding)
                rebuilt.append(holding)

        logger.info("Rebuilt %d holdings for %s from the ledger", len(rebuilt), portfolio_id)
        return rebuilt

    # ---------- Metrics ----------

    def portfolio_metrics(
        self, portfolio_id: str, prices: Optional[Mapping[str, Decimal]] = None
    ) -> PortfolioMetrics:
        self.get_portfolio(portfolio_id)
        return portfolio_metrics(
            self.store.list_holdings(portfolio_id),
            self.store.list_transactions(portfolio_id),
            prices,
        )
