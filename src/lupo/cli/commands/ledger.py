"""Ledger listing commands."""

from typing import Optional

import click

from lupo.cli.context import console, fail, open_service
from lupo.cli.ui import create_instruments_table, create_trades_table
from lupo.errors import LupoError
from lupo.system.config import SystemConfig


@click.command("trades")
@click.argument("name", required=False)
@click.pass_obj
def trades_command(config: SystemConfig, name: Optional[str]):
    """
    List trades, optionally only those whose stock name contains NAME.

    Example:
        lupo trades
        lupo trades apple
    """
    try:
        trades = open_service(config).trades(name)
    except LupoError as e:
        fail(e)

    if not trades:
        console.print("[yellow]No trades found[/yellow]")
        return
    console.print(create_trades_table(trades))


@click.command("stocks")
@click.argument("name", required=False)
@click.pass_obj
def stocks_command(config: SystemConfig, name: Optional[str]):
    """
    List registered instruments, optionally filtered by NAME substring.

    Example:
        lupo stocks
        lupo stocks cash
    """
    try:
        instruments = open_service(config).instruments(name)
    except LupoError as e:
        fail(e)

    if not instruments:
        console.print("[yellow]No instruments found[/yellow]")
        return
    console.print(create_instruments_table(instruments))
