"""Tests for realized gain aggregation."""
from datetime import datetime
from decimal import Decimal

from folio.accounting import realized_gains


class TestRealizedGains:
    def test_no_sells_no_gains(self, make_txn):
        assert realized_gains([make_txn("buy", "10", "100")]) == {}

    def test_sell_realizes_against_average_cost(self, make_txn):
        ledger = [
            make_txn("buy", "50", "150"),
            make_txn("buy", "25", "180"),
            make_txn("sell", "30", "200", fees="10"),
        ]

        gain = realized_gains(ledger)["AAPL"]

        assert gain.quantity_sold == Decimal("30")
        assert gain.proceeds == Decimal("6000")
        assert gain.cost_of_sold == Decimal("4800")
        assert gain.fees == Decimal("10")
        assert gain.realized_gain == Decimal("1190")

    def test_oversold_units_realize_nothing(self, make_txn):
        ledger = [
            make_txn("buy", "10", "100"),
            make_txn("sell", "15", "90"),
        ]

        gain = realized_gains(ledger)["AAPL"]

        assert gain.quantity_sold == Decimal("10")
        assert gain.realized_gain == Decimal("-100")

    def test_reopened_position_starts_fresh_cost(self, make_txn):
        ledger = [
            make_txn("buy", "10", "100"),
            make_txn("sell", "10", "110"),
            make_txn("buy", "10", "200"),
            make_txn("sell", "5", "210"),
        ]

        gain = realized_gains(ledger)["AAPL"]

        assert gain.quantity_sold == Decimal("15")
        assert gain.realized_gain == Decimal("100") + Decimal("50")

    def test_sell_before_any_buy_is_ignored(self, make_txn):
        ledger = [make_txn("sell", "5", "100"), make_txn("dividend", "1", "3")]

        assert realized_gains(ledger) == {}

    def test_replay_follows_recorded_order(self, make_txn):
        ledger = [
            make_txn("buy", "10", "100", date=datetime(2024, 3, 10)),
            make_txn("sell", "10", "110", date=datetime(2024, 3, 15)),
            make_txn("buy", "5", "200", date=datetime(2024, 3, 1)),
        ]

        gain = realized_gains(ledger)["AAPL"]

        assert gain.cost_of_sold == Decimal("1000")
        assert gain.realized_gain == Decimal("100")
