"""Portfolio aggregation.

Key components:
- PositionAggregator: Folds the trade ledger into per-instrument positions
- Models: Position, PositionDelta
- PortfolioService (lupo.services.portfolio.service): CLI-level operations
"""

from lupo.services.portfolio.aggregator import PositionAggregator, Positions, trade_deltas
from lupo.services.portfolio.models import (
    CURRENCY_NOT_FOUND,
    CURRENCY_STALE,
    PRICE_STALE,
    Position,
    PositionDelta,
)

__all__ = [
    "CURRENCY_NOT_FOUND",
    "CURRENCY_STALE",
    "PRICE_STALE",
    "Position",
    "PositionAggregator",
    "PositionDelta",
    "Positions",
    "trade_deltas",
]
