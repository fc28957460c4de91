"""Price refresh command."""

import click

from lupo.cli.context import console, fail, open_service
from lupo.cli.ui import create_refresh_progress, create_refresh_summary_table
from lupo.errors import LupoError
from lupo.system.config import SystemConfig


@click.command("prices")
@click.pass_obj
def prices_command(config: SystemConfig):
    """
    Refresh the price snapshot from Yahoo Finance.

    Fetches the tickers of all active positions and the currency pairs
    against the base currency concurrently. Symbols that fail are listed
    and left out of the snapshot; the others are still saved.

    Example:
        lupo prices
        lupo -v prices
    """
    try:
        service = open_service(config)
        symbols = service.symbols_to_refresh()

        console.print(f"[cyan]Refreshing {len(symbols)} symbol(s) against {service.base_currency}...[/cyan]")
        with create_refresh_progress(console) as progress:
            task = progress.add_task("Fetching quotes", total=len(symbols))

            def advance(symbol: str, ok: bool) -> None:
                progress.update(task, advance=1, description=f"Fetched {symbol}" if ok else f"Failed {symbol}")

            result = service.refresh_prices(symbols, on_result=advance)
    except LupoError as e:
        fail(e)

    console.print(create_refresh_summary_table(result))
    if result.failures:
        console.print(f"[yellow]⚠ {len(result.failures)} symbol(s) failed, kept out of the snapshot[/yellow]")
    else:
        console.print("[green]✓ All prices updated[/green]")
