"""Rich table formatters for CLI output."""

from typing import Iterable, Optional

from rich.table import Table
from rich.text import Text

from lupo.services.ledger import Instrument, Trade
from lupo.services.ledger.models import DATE_FORMAT
from lupo.services.portfolio import Position
from lupo.services.pricing import RefreshResult
from lupo.services.pricing.models import SNAPSHOT_DATE_FORMAT
from lupo.services.valuation import GroupTotal


def format_amount(value: Optional[float], decimals: int = 2) -> str:
    """Thousands-separated number, "-" when missing."""
    if value is None:
        return "-"
    return f"{value:,.{decimals}f}"


def format_percentage(value: Optional[float]) -> str:
    """Percentage of a fraction, "-" when there is no data."""
    if value is None:
        return "-"
    return f"{value:.2%}"


def create_trades_table(trades: Iterable[Trade]) -> Table:
    """
    Create a Rich table listing trades in ledger order.

    Args:
        trades: Trades to list

    Returns:
        Populated Rich Table
    """
    table = Table(title="Trades", show_header=True, header_style="bold cyan")
    table.add_column("Account", style="cyan", no_wrap=True)
    table.add_column("Date", style="dim")
    table.add_column("Type", style="magenta")
    table.add_column("Stock", style="green")
    table.add_column("Units", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Fees", justify="right", style="yellow")
    table.add_column("Split", justify="right")
    table.add_column("Currency", justify="right")

    for trade in trades:
        table.add_row(
            trade.account,
            trade.date.strftime(DATE_FORMAT),
            trade.type.value,
            trade.stock,
            format_amount(trade.units, 4),
            format_amount(trade.price, 4),
            format_amount(trade.fees),
            f"{trade.split:g}",
            f"{trade.currency:g}",
        )
    return table


def create_instruments_table(instruments: Iterable[Instrument]) -> Table:
    """
    Create a Rich table listing registered instruments.

    Args:
        instruments: Instruments to list

    Returns:
        Populated Rich Table
    """
    table = Table(title="Instruments", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Asset", style="cyan")
    table.add_column("Group", style="cyan")
    table.add_column("Tags", style="dim")
    table.add_column("Riskyness", style="magenta")
    table.add_column("Ticker", style="yellow")
    table.add_column("Traded", justify="center")
    table.add_column("Underlying", justify="center")

    for instrument in instruments:
        table.add_row(
            instrument.name,
            instrument.asset,
            instrument.group,
            instrument.tags,
            instrument.riskyness,
            instrument.ticker or "-",
            instrument.traded_currency,
            instrument.underlying_currency,
        )
    return table


def create_positions_table(positions: Iterable[Position], base_currency: str) -> Table:
    """
    Create a Rich table of valued positions.

    Flags (PO, CO, CN) are shown in red in the last column.

    Args:
        positions: Valued positions
        base_currency: Currency of the Amount column

    Returns:
        Populated Rich Table
    """
    table = Table(title="Portfolio", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Ticker", style="yellow")
    table.add_column("Units", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Cur", justify="center", style="dim")
    table.add_column(f"Amount ({base_currency})", justify="right", style="bold")
    table.add_column("%", justify="right", style="magenta")
    table.add_column("Cost", justify="right", style="dim")
    table.add_column("Revenue", justify="right", style="dim")
    table.add_column("Dividends", justify="right", style="dim")
    table.add_column("Fees", justify="right", style="dim")
    table.add_column("Flags", style="red")

    for position in positions:
        table.add_row(
            position.name,
            position.ticker or "-",
            format_amount(position.units, 4),
            format_amount(position.price, 4),
            position.currency,
            format_amount(position.amount),
            format_percentage(position.percentage),
            format_amount(position.cost),
            format_amount(position.revenue),
            format_amount(position.dividends),
            format_amount(position.fees),
            position.error,
        )
    return table


def create_group_table(groups: Iterable[GroupTotal], dimension: str, base_currency: str) -> Table:
    """
    Create a Rich table for a grouped report.

    Args:
        groups: Group totals, largest first
        dimension: Report dimension (column title)
        base_currency: Currency of the Amount column

    Returns:
        Populated Rich Table
    """
    table = Table(title=f"Portfolio by {dimension}", show_header=True, header_style="bold cyan")
    table.add_column(dimension.capitalize(), style="green", no_wrap=True)
    table.add_column("Positions", justify="right", style="dim")
    table.add_column(f"Amount ({base_currency})", justify="right", style="bold")
    table.add_column("%", justify="right", style="magenta")

    for group in groups:
        table.add_row(
            group.key or "-",
            str(group.count),
            format_amount(group.amount),
            format_percentage(group.percentage),
        )
    return table


def create_refresh_summary_table(result: RefreshResult) -> Table:
    """
    Create a Rich table summarizing a price refresh.

    Args:
        result: Outcome of the refresh

    Returns:
        Populated Rich Table with one row per symbol
    """
    table = Table(title="Price Refresh")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Price", justify="right", style="yellow")
    table.add_column("Date", style="dim")

    for symbol in sorted(set(result.quotes) | set(result.failures)):
        quote = result.quotes.get(symbol)
        if quote is not None:
            table.add_row(
                symbol,
                "[green]✓ Updated[/green]",
                format_amount(quote.price, 4),
                quote.date.strftime(SNAPSHOT_DATE_FORMAT),
            )
        else:
            table.add_row(symbol, Text(f"✗ {result.failures[symbol]}", style="red"), "-", "-")
    return table
