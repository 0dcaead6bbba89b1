from folio.accounting.projection import (
    HoldingProjector,
    OversellPolicy,
    ProjectionOutcome,
    ProjectionResult,
    next_holding_state,
    rebuild_holdings,
    validate_transaction,
)
from folio.accounting.metrics import (
    HoldingMetrics,
    PortfolioMetrics,
    holding_metrics,
    portfolio_metrics,
)
from folio.accounting.realized import RealizedGain, realized_gains

__all__ = [
    "HoldingProjector",
    "OversellPolicy",
    "ProjectionOutcome",
    "ProjectionResult",
    "next_holding_state",
    "rebuild_holdings",
    "validate_transaction",
    "HoldingMetrics",
    "PortfolioMetrics",
    "holding_metrics",
    "portfolio_metrics",
    "RealizedGain",
    "realized_gains",
]
