"""Portfolio commands - valued positions, grouped reports and totals."""

from typing import Optional

import click

from lupo.cli.context import console, fail, open_service
from lupo.cli.ui import create_group_table, create_positions_table, format_amount
from lupo.errors import LupoError
from lupo.services.valuation import GroupBy
from lupo.services.valuation.service import SORTABLE_FIELDS
from lupo.system.config import SystemConfig


@click.command("port")
@click.option("--all", "show_all", is_flag=True, help="Include closed positions")
@click.option("--sort", "sort_by", type=click.Choice(sorted(SORTABLE_FIELDS)), help="Sort by a position field")
@click.option("--desc", is_flag=True, help="Sort in descending order")
@click.pass_obj
def port_command(config: SystemConfig, show_all: bool, sort_by: Optional[str], desc: bool):
    """
    Show positions valued with the cached prices.

    Flags: PO = price older than the staleness window, CO = currency rate
    older than the window, CN = currency rate not found (amount left
    unconverted). Run "lupo prices" to refresh.

    Example:
        lupo port
        lupo port --all --sort amount --desc
    """
    try:
        service = open_service(config)
        positions = service.positions(all=show_all, sort_by=sort_by, descending=desc)
    except LupoError as e:
        fail(e)

    if not positions:
        console.print("[yellow]No positions[/yellow]")
        return

    console.print(create_positions_table(positions, service.base_currency))
    total = service.valuation.total(positions)
    console.print(f"[bold]Total: {format_amount(total)} {service.base_currency}[/bold]")


@click.command("report")
@click.argument("dimension", type=click.Choice([d.value for d in GroupBy]))
@click.pass_obj
def report_command(config: SystemConfig, dimension: str):
    """
    Sum active positions by DIMENSION.

    The currency dimension groups by underlying currency.

    Example:
        lupo report asset
        lupo report currency
    """
    try:
        service = open_service(config)
        groups = service.report(dimension)
    except LupoError as e:
        fail(e)

    if not groups:
        console.print("[yellow]No positions[/yellow]")
        return
    console.print(create_group_table(groups, dimension, service.base_currency))


@click.command("total")
@click.pass_obj
def total_command(config: SystemConfig):
    """
    Print the total portfolio value in the base currency.

    Example:
        lupo total
    """
    try:
        service = open_service(config)
        total = service.total()
    except LupoError as e:
        fail(e)

    console.print(f"{format_amount(total)} {service.base_currency}")
