"""Tests for the holdings projection engine."""
from datetime import datetime
from decimal import Decimal

import pytest

from folio.accounting import (
    HoldingProjector,
    ProjectionOutcome,
    next_holding_state,
    rebuild_holdings,
)
from folio.core.errors import InvalidTransaction, OversellError, UnknownHolding

PORTFOLIO_ID = "pf-1"


class TestBuys:
    def test_first_buy_creates_holding(self, projector, store, make_txn, clock):
        result = projector.apply_transaction(make_txn("buy", "50", "150.00"))

        assert result.outcome is ProjectionOutcome.CREATED
        holding = store.get_holding(PORTFOLIO_ID, "AAPL")
        assert holding == result.holding
        assert holding.id == "h-1"
        assert holding.quantity == Decimal("50")
        assert holding.average_cost == Decimal("150")
        assert holding.current_price is None
        assert holding.company_name == "AAPL"
        assert holding.exchange == "NASDAQ"
        assert holding.currency == "USD"
        assert holding.last_updated == clock.now

    def test_second_buy_blends_average_cost(self, projector, store, make_txn):
        projector.apply_transaction(make_txn("buy", "50", "150.00"))
        result = projector.apply_transaction(make_txn("buy", "25", "180.00"))

        assert result.outcome is ProjectionOutcome.UPDATED
        holding = store.get_holding(PORTFOLIO_ID, "AAPL")
        assert holding.quantity == Decimal("75")
        assert holding.average_cost == Decimal("160.00")
        assert holding.id == "h-1"

    def test_buys_sum_quantity_and_weight_cost(self, projector, store, make_txn):
        trades = [("10", "100"), ("3", "97.25"), ("7.5", "101.10"), ("0.125", "250")]
        for qty, price in trades:
            projector.apply_transaction(make_txn("buy", qty, price))

        holding = store.get_holding(PORTFOLIO_ID, "AAPL")
        total_qty = sum(Decimal(q) for q, _ in trades)
        weighted = sum(Decimal(q) * Decimal(p) for q, p in trades) / total_qty
        assert holding.quantity == total_qty
        assert abs(holding.average_cost - weighted) < Decimal("0.00000005")

    def test_at_most_one_holding_per_symbol(self, projector, store, make_txn):
        for _ in range(3):
            projector.apply_transaction(make_txn("buy", "1", "10"))
        projector.apply_transaction(make_txn("buy", "1", "10", symbol="MSFT"))

        symbols = [h.symbol for h in store.list_holdings(PORTFOLIO_ID)]
        assert sorted(symbols) == ["AAPL", "MSFT"]

    def test_holdings_are_scoped_by_portfolio(self, projector, store, make_txn):
        projector.apply_transaction(make_txn("buy", "5", "10"))
        projector.apply_transaction(make_txn("buy", "7", "20", portfolio_id="pf-2"))

        assert store.get_holding(PORTFOLIO_ID, "AAPL").quantity == Decimal("5")
        assert store.get_holding("pf-2", "AAPL").quantity == Decimal("7")

    @pytest.mark.parametrize("qty,price", [("0", "10"), ("-1", "10"), ("5", "0"), ("5", "-2")])
    def test_invalid_buy_is_rejected_without_mutation(self, projector, store, make_txn, qty, price):
        projector.apply_transaction(make_txn("buy", "10", "100"))
        before = store.get_holding(PORTFOLIO_ID, "AAPL")

        with pytest.raises(InvalidTransaction):
            projector.apply_transaction(make_txn("buy", qty, price))

        assert store.get_holding(PORTFOLIO_ID, "AAPL") == before

    def test_negative_fees_rejected(self, projector, make_txn):
        with pytest.raises(InvalidTransaction):
            projector.apply_transaction(make_txn("buy", "1", "10", fees="-1"))


class TestSells:
    def test_partial_sell_keeps_average_cost(self, projector, store, make_txn):
        projector.apply_transaction(make_txn("buy", "50", "150"))
        result = projector.apply_transaction(make_txn("sell", "20", "200"))

        assert result.outcome is ProjectionOutcome.UPDATED
        holding = store.get_holding(PORTFOLIO_ID, "AAPL")
        assert holding.quantity == Decimal("30")
        assert holding.average_cost == Decimal("150")

    def test_selling_everything_removes_holding(self, projector, store, make_txn):
        projector.apply_transaction(make_txn("buy", "50", "150"))
        result = projector.apply_transaction(make_txn("sell", "50", "175"))

        assert result.outcome is ProjectionOutcome.CLOSED
        assert result.holding is None
        assert store.get_holding(PORTFOLIO_ID, "AAPL") is None
        assert store.list_holdings(PORTFOLIO_ID) == ()

    def test_oversell_closes_position_by_default(self, projector, store, make_txn):
        projector.apply_transaction(make_txn("buy", "10", "100"))
        result = projector.apply_transaction(make_txn("sell", "15", "100"))

        assert result.outcome is ProjectionOutcome.CLOSED
        assert store.get_holding(PORTFOLIO_ID, "AAPL") is None

    def test_sell_without_holding_is_noop_by_default(self, projector, store, make_txn):
        result = projector.apply_transaction(make_txn("sell", "5", "100"))

        assert result.outcome is ProjectionOutcome.UNCHANGED
        assert store.list_holdings(PORTFOLIO_ID) == ()

    def test_zero_quantity_sell_rejected(self, projector, make_txn):
        projector.apply_transaction(make_txn("buy", "10", "100"))
        with pytest.raises(InvalidTransaction):
            projector.apply_transaction(make_txn("sell", "0", "100"))

    def test_quantity_stays_positive_after_every_apply(self, projector, store, make_txn):
        sequence = [
            ("buy", "10"), ("sell", "4"), ("sell", "6"), ("buy", "3"),
            ("sell", "10"), ("sell", "1"), ("buy", "2"), ("sell", "1.5"),
        ]
        for kind, qty in sequence:
            projector.apply_transaction(make_txn(kind, qty, "50"))
            for holding in store.list_holdings(PORTFOLIO_ID):
                assert holding.quantity > 0


class TestRejectPolicy:
    @pytest.fixture
    def strict(self, store, clock):
        return HoldingProjector(store, oversell_policy="reject", clock=clock)

    def test_oversell_raises_and_leaves_holding(self, strict, store, make_txn):
        strict.apply_transaction(make_txn("buy", "10", "100"))
        with pytest.raises(OversellError) as exc_info:
            strict.apply_transaction(make_txn("sell", "11", "100"))

        assert exc_info.value.held == Decimal("10")
        assert store.get_holding(PORTFOLIO_ID, "AAPL").quantity == Decimal("10")

    def test_exact_sell_still_closes(self, strict, store, make_txn):
        strict.apply_transaction(make_txn("buy", "10", "100"))
        result = strict.apply_transaction(make_txn("sell", "10", "100"))

        assert result.outcome is ProjectionOutcome.CLOSED
        assert store.get_holding(PORTFOLIO_ID, "AAPL") is None

    def test_sell_without_holding_raises(self, strict, make_txn):
        with pytest.raises(UnknownHolding):
            strict.apply_transaction(make_txn("sell", "1", "100"))


class TestLedgerOnlyTypes:
    @pytest.mark.parametrize(
        "kind",
        [
            "dividend", "split", "bonus", "opening_balance", "consolidation",
            "cancellation", "demerger", "return_of_capital",
        ],
    )
    def test_type_does_not_move_holding(self, projector, store, make_txn, kind):
        projector.apply_transaction(make_txn("buy", "10", "100"))
        before = store.get_holding(PORTFOLIO_ID, "AAPL")

        result = projector.apply_transaction(make_txn(kind, "2", "5"))

        assert result.outcome is ProjectionOutcome.LEDGER_ONLY
        assert store.get_holding(PORTFOLIO_ID, "AAPL") == before

    def test_dividend_without_holding_creates_nothing(self, projector, store, make_txn):
        result = projector.apply_transaction(make_txn("dividend", "1", "12.50"))

        assert result.outcome is ProjectionOutcome.LEDGER_ONLY
        assert result.holding is None
        assert store.list_holdings(PORTFOLIO_ID) == ()


class TestNextHoldingState:
    def test_is_pure(self, projector, store, make_txn):
        projector.apply_transaction(make_txn("buy", "10", "100"))
        current = store.get_holding(PORTFOLIO_ID, "AAPL")

        result = next_holding_state(current, make_txn("buy", "10", "200"))

        assert result.holding.average_cost == Decimal("150")
        assert store.get_holding(PORTFOLIO_ID, "AAPL") is current


class TestRebuild:
    def test_replay_is_deterministic(self, make_txn, clock):
        ledger = [
            make_txn("buy", "50", "150"),
            make_txn("buy", "25", "180"),
            make_txn("sell", "30", "170"),
            make_txn("buy", "10", "310", symbol="MSFT"),
            make_txn("dividend", "1", "40"),
            make_txn("sell", "10", "300", symbol="MSFT"),
        ]

        first = rebuild_holdings(ledger, clock=clock, id_factory=lambda: "h")
        second = rebuild_holdings(ledger, clock=clock, id_factory=lambda: "h")

        assert first == second
        assert list(first) == [(PORTFOLIO_ID, "AAPL")]
        aapl = first[(PORTFOLIO_ID, "AAPL")]
        assert aapl.quantity == Decimal("45")
        assert aapl.average_cost == Decimal("160")

    def test_back_dated_buy_replays_where_it_was_recorded(self, projector, store, make_txn):
        ledger = [
            make_txn("buy", "10", "100", date=datetime(2024, 3, 10)),
            make_txn("sell", "10", "100", date=datetime(2024, 3, 15)),
            make_txn("buy", "5", "200", date=datetime(2024, 3, 1)),
        ]
        for transaction in ledger:
            projector.apply_transaction(transaction)
        live = store.get_holding(PORTFOLIO_ID, "AAPL")

        rebuilt = rebuild_holdings(ledger)[(PORTFOLIO_ID, "AAPL")]

        assert live.quantity == rebuilt.quantity == Decimal("5")
        assert live.average_cost == rebuilt.average_cost == Decimal("200")

    def test_reject_policy_replays_an_accepted_back_dated_sell(self, make_txn):
        ledger = [
            make_txn("buy", "10", "100", date=datetime(2024, 3, 10)),
            make_txn("sell", "5", "100", date=datetime(2024, 3, 5)),
        ]

        holdings = rebuild_holdings(ledger, oversell_policy="reject")

        assert holdings[(PORTFOLIO_ID, "AAPL")].quantity == Decimal("5")
