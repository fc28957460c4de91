"""Valuation service - prices positions in the base currency and builds reports.

Valuation of one position:
  1. Price: cash equivalents price at 1.0; otherwise the ticker's quote
     (flag PO when the quote is stale); otherwise 0.0.
  2. Conversion: rate of "{currency}{BASE}=X" from the same snapshot.
     amount = price x units x rate (flag CO when the rate is stale).
     Without a rate, amount = price x units and flag CN.
  3. Percentage: amount / total of the retained positions. When nothing is
     retained or the total is zero, percentage is None ("no data").

Stale means older than stale_after (5 days by default) relative to now.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable

from lupo.services.portfolio.models import (
    CURRENCY_NOT_FOUND,
    CURRENCY_STALE,
    DEFAULT_CLOSED_THRESHOLD,
    PRICE_STALE,
    Position,
)
from lupo.services.pricing.models import PriceQuote, currency_pair
from lupo.system import LoggerFactory

logger = LoggerFactory.get_logger()


class GroupBy(str, Enum):
    """Dimensions available for grouped reports."""

    CURRENCY = "currency"
    ASSET = "asset"
    GROUP = "group"
    RISKYNESS = "riskyness"
    TAGS = "tags"

    def key_of(self, position: Position) -> str:
        if self is GroupBy.CURRENCY:
            return position.underlying_currency or position.currency
        return getattr(position, self.value)


@dataclass
class GroupTotal:
    """
    One line of a grouped report.

    Attributes:
        key: Group value (e.g. "EUR", "Equity")
        amount: Sum of base-currency amounts
        percentage: Share of the total, None when there is no data
        count: Number of positions in the group
    """

    key: str
    amount: float = 0.0
    percentage: float | None = None
    count: int = 0


SORTABLE_FIELDS = frozenset(Position.model_fields)


def _as_utc(now: datetime | None) -> datetime:
    """Current UTC time when None; naive times are taken as UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def sort_positions(positions: Iterable[Position], field: str, descending: bool = False) -> list[Position]:
    """
    Sort positions by a Position field name.

    None values (percentage without data, missing ticker) sort last.

    Raises:
        ValueError: If field is not a Position field
    """
    if field not in SORTABLE_FIELDS:
        raise ValueError(f"Unknown sort field '{field}', expected one of {sorted(SORTABLE_FIELDS)}")

    positions = list(positions)
    present = [p for p in positions if getattr(p, field) is not None]
    missing = [p for p in positions if getattr(p, field) is None]
    return sorted(present, key=lambda p: getattr(p, field), reverse=descending) + missing


class ValuationService:
    """
    Values positions against a price snapshot.

    Args:
        base_currency: Currency all amounts are converted to
        stale_after: Quotes older than this get a staleness flag
        closed_threshold: |units| below this is a closed position

    Example:
        >>> service = ValuationService(base_currency="USD")
        >>> valued = service.value(positions.values(), cache.load())
        >>> service.total(valued)
        12345.67
    """

    def __init__(
        self,
        base_currency: str = "USD",
        stale_after: timedelta = timedelta(days=5),
        closed_threshold: float = DEFAULT_CLOSED_THRESHOLD,
    ):
        self.base_currency = base_currency.upper()
        self.stale_after = stale_after
        self.closed_threshold = closed_threshold

    def _is_stale(self, quote: PriceQuote, now: datetime) -> bool:
        return now - quote.date > self.stale_after

    def value_position(
        self, position: Position, quotes: dict[str, PriceQuote], now: datetime | None = None
    ) -> Position:
        """Return a valued copy of one position (percentage is left unset)."""
        now = _as_utc(now)
        valued = position.model_copy(update={"price": 0.0, "amount": 0.0, "percentage": None, "error": ""})

        if valued.cash_equivalent:
            valued.price = 1.0
        elif valued.ticker and valued.ticker in quotes:
            quote = quotes[valued.ticker]
            valued.price = quote.price
            if self._is_stale(quote, now):
                valued.add_flag(PRICE_STALE)

        rate_quote = quotes.get(currency_pair(valued.currency, self.base_currency))
        if rate_quote is not None:
            valued.amount = valued.price * valued.units * rate_quote.price
            if self._is_stale(rate_quote, now):
                valued.add_flag(CURRENCY_STALE)
        else:
            valued.amount = valued.price * valued.units
            valued.add_flag(CURRENCY_NOT_FOUND)

        return valued

    def value(
        self,
        positions: Iterable[Position],
        quotes: dict[str, PriceQuote],
        include_closed: bool = False,
        now: datetime | None = None,
    ) -> list[Position]:
        """
        Value positions and compute their portfolio weights.

        Args:
            positions: Aggregated positions
            quotes: Price snapshot keyed by ticker
            include_closed: Keep positions with near-zero units
            now: Evaluation time for staleness (defaults to current UTC time, naive is UTC)

        Returns:
            Valued copies of the retained positions, in input order
        """
        now = _as_utc(now)

        retained = [p for p in positions if include_closed or not p.is_closed(self.closed_threshold)]
        valued = [self.value_position(p, quotes, now) for p in retained]

        total = sum(p.amount for p in valued)
        if valued and total != 0:
            for p in valued:
                p.percentage = p.amount / total
        else:
            logger.debug("valuation.no_data", positions=len(valued), total=total)

        flagged = sum(1 for p in valued if p.error)
        if flagged:
            logger.info("valuation.flagged_positions", count=flagged)
        return valued

    def group(self, positions: Iterable[Position], dimension: GroupBy | str) -> list[GroupTotal]:
        """
        Sum valued positions by a report dimension.

        Returns:
            Group totals ordered by amount, largest first
        """
        dimension = GroupBy(dimension)
        groups: dict[str, GroupTotal] = {}
        for position in positions:
            key = dimension.key_of(position)
            group = groups.setdefault(key, GroupTotal(key=key))
            group.amount += position.amount
            group.count += 1

        total = sum(g.amount for g in groups.values())
        if groups and total != 0:
            for group in groups.values():
                group.percentage = group.amount / total

        return sorted(groups.values(), key=lambda g: g.amount, reverse=True)

    def total(self, positions: Iterable[Position]) -> float:
        """Portfolio value in the base currency."""
        return sum(p.amount for p in positions)
