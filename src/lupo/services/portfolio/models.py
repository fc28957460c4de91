"""Data models for portfolio aggregation.

- Position: Per-instrument holding and accumulated cost/revenue/fee state
- PositionDelta: Change one trade applies to one position
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from lupo.services.ledger.models import Instrument

DEFAULT_CLOSED_THRESHOLD = 0.01

# Valuation annotations written to Position.error
PRICE_STALE = "PO"
CURRENCY_STALE = "CO"
CURRENCY_NOT_FOUND = "CN"


class Position(BaseModel):
    """
    Aggregate position for one instrument.

    Cost, revenue, dividends and fees are accumulated after applying each
    trade's currency multiplier, i.e. in the base currency. Valuation fields
    (price, amount, percentage, error) are filled by ValuationService.

    Attributes:
        name: Instrument name (key)
        ticker: External quote symbol
        currency: Traded currency (used for conversion)
        underlying_currency: Currency of the economic exposure
        asset: Asset class
        group: Grouping label
        tags: Free-text tags
        riskyness: Risk bucket
        cash_equivalent: Always priced at 1.0
        units: Units held (negative for an overdrawn cash account)
        cost: Money spent (Buy, TrOut)
        revenue: Money received (Sell, TrIn)
        dividends: Dividends received
        fees: Fees paid
        price: Last known price in traded currency
        amount: Value in base currency
        percentage: Share of the portfolio value, None when there is no data
        error: Space-separated valuation flags (PO, CO, CN)

    Example:
        >>> position = Position.from_instrument(instrument)
        >>> position.units
        0.0
    """

    name: str
    ticker: str | None = None
    currency: str = ""
    underlying_currency: str = ""
    asset: str = ""
    group: str = ""
    tags: str = ""
    riskyness: str = ""
    cash_equivalent: bool = False

    units: float = 0.0
    cost: float = 0.0
    revenue: float = 0.0
    dividends: float = 0.0
    fees: float = 0.0

    price: float = 0.0
    amount: float = 0.0
    percentage: float | None = None
    error: str = ""

    model_config = ConfigDict(frozen=False)  # mutated in place by the fold

    @classmethod
    def from_instrument(cls, instrument: Instrument) -> "Position":
        """Zeroed position carrying the instrument's registry metadata."""
        return cls(
            name=instrument.name,
            ticker=instrument.ticker,
            currency=instrument.traded_currency,
            underlying_currency=instrument.underlying_currency,
            asset=instrument.asset,
            group=instrument.group,
            tags=instrument.tags,
            riskyness=instrument.riskyness,
            cash_equivalent=instrument.is_cash_equivalent,
        )

    def is_closed(self, threshold: float = DEFAULT_CLOSED_THRESHOLD) -> bool:
        """Near-zero holdings count as closed."""
        return abs(self.units) < threshold

    def add_flag(self, flag: str) -> None:
        """Append a valuation flag to the error annotation."""
        self.error = f"{self.error} {flag}".strip()

    @property
    def flags(self) -> list[str]:
        return self.error.split()


@dataclass(frozen=True)
class PositionDelta:
    """
    Change one trade applies to one position.

    units is updated as units * units_factor + units_delta, so a Split
    (factor only) and a Buy/Sell (delta only) share one code path.
    """

    name: str
    units_delta: float = 0.0
    units_factor: float = 1.0
    cost: float = 0.0
    revenue: float = 0.0
    dividends: float = 0.0
    fees: float = 0.0

    def apply_to(self, position: Position) -> None:
        position.units = position.units * self.units_factor + self.units_delta
        position.cost += self.cost
        position.revenue += self.revenue
        position.dividends += self.dividends
        position.fees += self.fees
