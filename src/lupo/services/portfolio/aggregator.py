"""Position aggregator - folds the trade ledger into per-instrument positions.

Every non-cash Buy, Sell and Div also moves money in the account's cash
bucket ("Cash" + account), double-entry style:

    Kind   Target position                            Linked cash position
    Div    dividends += amount                        units += amount, dividends += amount
    Split  units *= split                             -
    TrIn   units += units, revenue += amount          -
    TrOut  units -= units, cost += amount             -
    Buy    units += units, cost += amount, fees += f  units -= amount, cost += amount, fees += f
    Sell   units -= units, revenue += amount, fees += f  units += amount, revenue += amount, fees += f

where amount = units x price x currency and f = fees x currency.

Each event is handled by computing both deltas from the current state and
only then applying them, so target and cash are updated together.
"""

from lupo.errors import UnknownCashAccountError, UnknownInstrumentError
from lupo.services.ledger.models import CASH_PREFIX, Instrument, Trade, TradeType, cash_account_name
from lupo.services.ledger.store import LedgerStore
from lupo.services.portfolio.models import DEFAULT_CLOSED_THRESHOLD, Position, PositionDelta
from lupo.system import LoggerFactory

logger = LoggerFactory.get_logger()

Positions = dict[str, Position]


def trade_deltas(trade: Trade, target: Position, cash: Position | None) -> list[PositionDelta]:
    """
    Compute the position changes caused by one trade.

    Args:
        trade: Trade event
        target: Position of the traded instrument
        cash: Linked cash position, None for cash instruments and splits

    Returns:
        Deltas to apply, target first
    """
    amount = trade.amount
    fee = trade.fee_amount

    if trade.type == TradeType.SPLIT:
        return [PositionDelta(target.name, units_factor=trade.split)]

    if trade.type == TradeType.TRANSFER_IN:
        return [PositionDelta(target.name, units_delta=trade.units, revenue=amount)]

    if trade.type == TradeType.TRANSFER_OUT:
        return [PositionDelta(target.name, units_delta=-trade.units, cost=amount)]

    if trade.type == TradeType.DIVIDEND:
        deltas = [PositionDelta(target.name, dividends=amount)]
        if cash is not None:
            deltas.append(PositionDelta(cash.name, units_delta=amount, dividends=amount))
        return deltas

    if trade.type == TradeType.BUY:
        deltas = [PositionDelta(target.name, units_delta=trade.units, cost=amount, fees=fee)]
        if cash is not None:
            deltas.append(PositionDelta(cash.name, units_delta=-amount, cost=amount, fees=fee))
        return deltas

    if trade.type == TradeType.SELL:
        deltas = [PositionDelta(target.name, units_delta=-trade.units, revenue=amount, fees=fee)]
        if cash is not None:
            deltas.append(PositionDelta(cash.name, units_delta=amount, revenue=amount, fees=fee))
        return deltas

    raise AssertionError(f"Unhandled trade type {trade.type!r}")


class PositionAggregator:
    """
    Builds the position table from the instrument registry and trade ledger.

    Example:
        >>> aggregator = PositionAggregator(store.load_instruments())
        >>> positions = aggregator.aggregate(store)
        >>> open_positions = aggregator.active(positions)
    """

    def __init__(self, instruments: dict[str, Instrument], closed_threshold: float = DEFAULT_CLOSED_THRESHOLD):
        self.instruments = instruments
        self.closed_threshold = closed_threshold

    def empty_positions(self) -> Positions:
        """One zeroed position per registered instrument."""
        return {name: Position.from_instrument(instrument) for name, instrument in self.instruments.items()}

    def apply(self, positions: Positions, trade: Trade) -> Positions:
        """
        Apply one trade to the accumulator (the fold reducer).

        Raises:
            UnknownInstrumentError: If the traded instrument is not registered
            UnknownCashAccountError: If the linked cash bucket is not registered
        """
        target = positions.get(trade.stock)
        if target is None:
            raise UnknownInstrumentError(trade.stock)

        cash: Position | None = None
        if not target.name.startswith(CASH_PREFIX) and trade.type != TradeType.SPLIT:
            cash_name = cash_account_name(trade.account)
            cash = positions.get(cash_name)
            if cash is None:
                raise UnknownCashAccountError(cash_name, trade.account)

        for delta in trade_deltas(trade, target, cash):
            delta.apply_to(positions[delta.name])

        logger.debug(
            "portfolio.trade_applied",
            stock=trade.stock,
            type=trade.type.value,
            units=positions[trade.stock].units,
        )
        return positions

    def aggregate(self, store: LedgerStore) -> Positions:
        """Fold the whole ledger once, in file order."""
        positions = store.fold_trades(self.empty_positions(), self.apply)
        logger.info("portfolio.aggregated", positions=len(positions))
        return positions

    def active(self, positions: Positions) -> Positions:
        """Positions that are not closed."""
        return {name: p for name, p in positions.items() if not p.is_closed(self.closed_threshold)}
