"""Storage commands - bootstrap and validate the portfolio home."""

import click

from lupo.cli.context import console, fail, open_service
from lupo.errors import LupoError
from lupo.services.ledger import LedgerStore
from lupo.system.config import SystemConfig


@click.command("init")
@click.option("--force", is_flag=True, help="Delete the existing home directory and start over")
@click.pass_obj
def init_command(config: SystemConfig, force: bool):
    """
    Create the portfolio home with empty stocks.tsv and trades.tsv.

    Existing files are kept unless --force is given, which wipes the
    whole directory first (including the price snapshot).

    Example:
        lupo init
        lupo -d ~/portfolio init --force
    """
    try:
        store = LedgerStore.create(config.home, force=force)
    except LupoError as e:
        fail(e)

    console.print(f"[green]✓ Portfolio initialized in {store.home_dir}[/green]")
    console.print(f"[dim]Register instruments in {store.stocks_path.name}, then record trades in {store.trades_path.name}[/dim]")


@click.command("check")
@click.pass_obj
def check_command(config: SystemConfig):
    """
    Parse the registry and the ledger and count their rows.

    Fails with the offending file, line and row on the first parse error.

    Example:
        lupo check
    """
    try:
        summary = open_service(config).check()
    except LupoError as e:
        fail(e)

    console.print(f"[green]✓ {summary.trades} trades, {summary.instruments} instruments[/green]")
