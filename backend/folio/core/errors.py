"""
Typed failures raised by the ledger, the holdings projection and the services.

The accounting core raises these and never logs or retries; the API layer maps
them onto HTTP responses.
"""


class FolioError(Exception):
    """Base class for all application errors."""


class InvalidTransaction(FolioError):
    """A transaction was rejected before any state was touched."""


class UnknownHolding(FolioError):
    """A sell referenced a (portfolio, symbol) with no open holding."""

    def __init__(self, portfolio_id: str, symbol: str) -> None:
        super().__init__(f"No holding for {symbol} in portfolio {portfolio_id}")
        self.portfolio_id = portfolio_id
        self.symbol = symbol


class OversellError(FolioError):
    """A sell exceeded the quantity held."""

    def __init__(self, symbol: str, held, requested) -> None:
        super().__init__(f"Cannot sell {requested} {symbol}: only {held} held")
        self.symbol = symbol
        self.held = held
        self.requested = requested


class PortfolioNotFound(FolioError):
    def __init__(self, portfolio_id: str) -> None:
        super().__init__(f"Portfolio not found: {portfolio_id}")
        self.portfolio_id = portfolio_id


class HoldingNotFound(FolioError):
    def __init__(self, portfolio_id: str, symbol: str) -> None:
        super().__init__(f"Holding not found: {symbol} in portfolio {portfolio_id}")
        self.portfolio_id = portfolio_id
        self.symbol = symbol


class MarketDataUnavailable(FolioError):
    """No fresh or cached market data could be resolved."""
