# Ledger
from folio.models.portfolio import Portfolio, PerformanceMethod
from folio.models.transaction import Transaction, NewTransaction, TransactionType

# Accounting
from folio.models.holding import Holding

# Market Data
from folio.models.market_data import Quote, FxRate, InstrumentInfo

__all__ = [
    "Portfolio",
    "PerformanceMethod",
    "Transaction",
    "NewTransaction",
    "TransactionType",
    "Holding",
    "Quote",
    "FxRate",
    "InstrumentInfo",
]
