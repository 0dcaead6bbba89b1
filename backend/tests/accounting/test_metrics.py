"""Tests for holding and portfolio metrics."""
from decimal import Decimal

from folio.accounting import holding_metrics, portfolio_metrics
from folio.models import Holding


def _holding(symbol="AAPL", quantity="50", average_cost="150", current_price="175.50"):
    return Holding(
        id=f"h-{symbol}",
        portfolio_id="pf-1",
        symbol=symbol,
        company_name=symbol,
        exchange="NASDAQ",
        currency="USD",
        quantity=Decimal(quantity),
        average_cost=Decimal(average_cost),
        current_price=Decimal(current_price) if current_price is not None else None,
    )


class TestHoldingMetrics:
    def test_gain_on_priced_holding(self):
        metrics = holding_metrics(_holding())

        assert metrics.current_value == Decimal("8775.00")
        assert metrics.cost_basis == Decimal("7500")
        assert metrics.total_gain == Decimal("1275.00")
        assert metrics.total_gain_percent == Decimal("17")

    def test_explicit_price_overrides_stored_price(self):
        metrics = holding_metrics(_holding(), Decimal("120"))

        assert metrics.current_value == Decimal("6000")
        assert metrics.total_gain == Decimal("-1500")
        assert metrics.total_gain_percent == Decimal("-20")

    def test_missing_price_values_holding_at_zero(self):
        metrics = holding_metrics(_holding(current_price=None))

        assert metrics.current_value == Decimal("0")
        assert metrics.total_gain == Decimal("-7500")
        assert metrics.total_gain_percent == Decimal("-100")

    def test_zero_cost_basis_gives_zero_percent(self):
        metrics = holding_metrics(_holding(average_cost="0"))

        assert metrics.total_gain == Decimal("8775.00")
        assert metrics.total_gain_percent == Decimal("0")
        assert metrics.total_gain_percent.is_finite()


class TestPortfolioMetrics:
    def test_empty_portfolio_is_all_zero(self):
        metrics = portfolio_metrics([], [])

        assert metrics.total_value == 0
        assert metrics.total_gain == 0
        assert metrics.total_gain_percent == 0
        assert metrics.dividend_yield == 0
        assert metrics.holdings_count == 0

    def test_sums_across_holdings(self):
        holdings = [
            _holding(),
            _holding("MSFT", quantity="25", average_cost="280", current_price="310.25"),
        ]

        metrics = portfolio_metrics(holdings, [])

        assert metrics.total_value == Decimal("16531.25")
        assert metrics.total_cost == Decimal("14500")
        assert metrics.total_gain == Decimal("2031.25")
        assert metrics.total_gain_percent == Decimal("2031.25") / Decimal("14500") * 100
        assert metrics.holdings_count == 2

    def test_dividend_yield_uses_dividend_totals_only(self, make_txn):
        ledger = [
            make_txn("buy", "50", "150"),
            make_txn("dividend", "1", "43.875", total_amount="43.875"),
            make_txn("dividend", "1", "43.875", total_amount="43.875"),
            make_txn("sell", "1", "175"),
        ]

        metrics = portfolio_metrics([_holding()], ledger)

        assert metrics.dividend_yield == Decimal("1")

    def test_dividends_without_value_give_zero_yield(self, make_txn):
        ledger = [make_txn("dividend", "1", "10")]

        metrics = portfolio_metrics([_holding(current_price=None)], ledger)

        assert metrics.dividend_yield == 0

    def test_price_map_overrides_by_symbol(self):
        metrics = portfolio_metrics([_holding()], [], prices={"AAPL": Decimal("150")})

        assert metrics.total_value == Decimal("7500")
        assert metrics.total_gain == 0
        assert metrics.total_gain_percent == 0

    def test_losses_are_negative(self):
        metrics = portfolio_metrics([_holding(current_price="75")], [])

        assert metrics.total_gain == Decimal("-3750")
        assert metrics.total_gain_percent == Decimal("-50")
