"""
Holding projection engine.

Applies ledger transactions one at a time to the holdings projection,
keeping at most one holding per (portfolio, symbol) and never leaving a
holding with a non-positive quantity behind.

Cost basis uses the weighted-average method: a buy blends its price into
the average cost, a sell reduces quantity and leaves the average untouched.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Callable, Iterable, Literal, Optional

from folio.core.errors import InvalidTransaction, OversellError, UnknownHolding
from folio.core.timeutils import utcnow
from folio.models import Holding, Transaction, TransactionType
from folio.storage import InMemoryLedgerStore, LedgerStore

OversellPolicy = Literal["close", "reject"]

# Matches the 8 decimal places monetary columns are stored with
AVERAGE_COST_QUANTUM = Decimal("0.00000001")

ZERO = Decimal("0")


class ProjectionOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    CLOSED = "closed"
    LEDGER_ONLY = "ledger_only"  # type has no projection rule yet
    UNCHANGED = "unchanged"  # sell against no holding under the "close" policy


@dataclass(frozen=True)
class ProjectionResult:
    outcome: ProjectionOutcome
    holding: Optional[Holding]


def validate_transaction(transaction: Transaction) -> None:
    """Reject malformed transactions before any state is read or written."""
    if not transaction.portfolio_id:
        raise InvalidTransaction("Transaction has no portfolio")
    if not transaction.symbol:
        raise InvalidTransaction("Transaction has no symbol")
    if transaction.quantity <= ZERO:
        raise InvalidTransaction(
            f"Quantity must be positive, got {transaction.quantity} for {transaction.symbol}"
        )
    if transaction.price < ZERO:
        raise InvalidTransaction(
            f"Price must not be negative, got {transaction.price} for {transaction.symbol}"
        )
    if transaction.fees < ZERO:
        raise InvalidTransaction(f"Fees must not be negative, got {transaction.fees}")
    if transaction.type is TransactionType.BUY and transaction.price <= ZERO:
        raise InvalidTransaction(
            f"Buy price must be positive, got {transaction.price} for {transaction.symbol}"
        )


def weighted_average_cost(
    held_qty: Decimal, held_cost: Decimal, trade_qty: Decimal, trade_price: Decimal
) -> Decimal:
    new_qty = held_qty + trade_qty
    if new_qty <= ZERO:
        raise InvalidTransaction(f"Resulting quantity {new_qty} is not positive")
    total_cost = held_qty * held_cost + trade_qty * trade_price
    return (total_cost / new_qty).quantize(AVERAGE_COST_QUANTUM, rounding=ROUND_HALF_EVEN)


def next_holding_state(
    current: Optional[Holding],
    transaction: Transaction,
    *,
    oversell_policy: OversellPolicy = "close",
    now: Optional[datetime] = None,
    new_id: Optional[str] = None,
) -> ProjectionResult:
    """
    Compute the holding that results from applying ``transaction`` to
    ``current`` without touching any store.

    Raises InvalidTransaction, OversellError or UnknownHolding; nothing has
    been written when it does.
    """
    validate_transaction(transaction)
    now = now or utcnow()

    if not transaction.type.moves_holding:
        return ProjectionResult(ProjectionOutcome.LEDGER_ONLY, current)

    if transaction.type is TransactionType.BUY:
        if current is None:
            holding = Holding(
                id=new_id or str(uuid.uuid4()),
                portfolio_id=transaction.portfolio_id,
                symbol=transaction.symbol,
                # Enriched later from instrument metadata
                company_name=transaction.symbol,
                exchange=transaction.exchange,
                currency=transaction.currency,
                quantity=transaction.quantity,
                average_cost=transaction.price.quantize(
                    AVERAGE_COST_QUANTUM, rounding=ROUND_HALF_EVEN
                ),
                current_price=None,
                last_updated=now,
            )
            return ProjectionResult(ProjectionOutcome.CREATED, holding)

        holding = replace(
            current,
            quantity=current.quantity + transaction.quantity,
            average_cost=weighted_average_cost(
                current.quantity, current.average_cost, transaction.quantity, transaction.price
            ),
            last_updated=now,
        )
        return ProjectionResult(ProjectionOutcome.UPDATED, holding)

    # SELL
    if current is None:
        if oversell_policy == "reject":
            raise UnknownHolding(transaction.portfolio_id, transaction.symbol)
        return ProjectionResult(ProjectionOutcome.UNCHANGED, None)

    if oversell_policy == "reject" and transaction.quantity > current.quantity:
        raise OversellError(transaction.symbol, current.quantity, transaction.quantity)

    remaining = current.quantity - transaction.quantity
    if remaining <= ZERO:
        return ProjectionResult(ProjectionOutcome.CLOSED, None)

    holding = replace(current, quantity=remaining, last_updated=now)
    return ProjectionResult(ProjectionOutcome.UPDATED, holding)


class HoldingProjector:
    """
    Writes projection results into a LedgerStore.

    Not safe for concurrent use on the same (portfolio, symbol); callers that
    share a projector across threads must serialize apply_transaction.
    """

    def __init__(
        self,
        store: LedgerStore,
        oversell_policy: OversellPolicy = "close",
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.store = store
        self.oversell_policy = oversell_policy
        self.clock = clock
        self.id_factory = id_factory

    def preview(self, transaction: Transaction) -> ProjectionResult:
        """Resolve the effect of a transaction without writing it."""
        current = self.store.get_holding(transaction.portfolio_id, transaction.symbol)
        return next_holding_state(
            current,
            transaction,
            oversell_policy=self.oversell_policy,
            now=self.clock(),
            new_id=self.id_factory() if current is None else None,
        )

    def commit(self, transaction: Transaction, result: ProjectionResult) -> None:
        if result.outcome in (ProjectionOutcome.CREATED, ProjectionOutcome.UPDATED):
            self.store.save_holding(result.holding)
        elif result.outcome is ProjectionOutcome.CLOSED:
            self.store.delete_holding(transaction.portfolio_id, transaction.symbol)

    def apply_transaction(self, transaction: Transaction) -> ProjectionResult:
        result = self.preview(transaction)
        self.commit(transaction, result)
        return result


def rebuild_holdings(
    transactions: Iterable[Transaction],
    oversell_policy: OversellPolicy = "close",
    clock: Callable[[], datetime] = utcnow,
    id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> dict[tuple[str, str], Holding]:
    """
    Replay a ledger into an empty projection and return the resulting
    holdings keyed by (portfolio_id, symbol).

    Transactions are applied in the order given, which must be the order
    they were recorded (LedgerStore.list_transactions). Trade dates do not
    reorder the replay, so a back-dated entry lands where it was recorded,
    exactly as it did when it was first applied.
    """
    store = InMemoryLedgerStore()
    projector = HoldingProjector(
        store, oversell_policy=oversell_policy, clock=clock, id_factory=id_factory
    )
    portfolio_ids: set[str] = set()
    for transaction in transactions:
        projector.apply_transaction(transaction)
        portfolio_ids.add(transaction.portfolio_id)

    holdings: dict[tuple[str, str], Holding] = {}
    for portfolio_id in portfolio_ids:
        for holding in store.list_holdings(portfolio_id):
            holdings[(holding.portfolio_id, holding.symbol)] = holding
    return holdings
