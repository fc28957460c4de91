"""lupo CLI main entry point."""

from pathlib import Path
from typing import Optional

import click

from lupo import __version__
from lupo.cli.commands import (
    check_command,
    init_command,
    port_command,
    prices_command,
    report_command,
    stocks_command,
    total_command,
    trades_command,
)
from lupo.cli.context import fail
from lupo.errors import LupoError
from lupo.system import LoggerFactory
from lupo.system.config import load_system_config

LEVELS = ["ERROR", "WARNING", "INFO", "DEBUG"]


def resolve_log_level(configured: str, verbose: int, quiet: bool) -> str:
    """
    Console log level from the configured level and the -v/-q flags.

    Each -v lowers the threshold one step (WARNING -> INFO -> DEBUG);
    -q shows errors only.
    """
    if quiet:
        return "ERROR"
    if verbose == 0:
        return configured
    start = LEVELS.index(configured) if configured in LEVELS else 1
    return LEVELS[min(start + verbose, len(LEVELS) - 1)]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--directory",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    help="Portfolio home directory (overrides config and LUPO_HOME)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (defaults to LUPO_CONFIG or lupo.yaml in the app directory)",
)
@click.option("--verbose", "-v", count=True, help="More log output (repeatable)")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.pass_context
def main(ctx: click.Context, directory: Optional[Path], config_path: Optional[Path], verbose: int, quiet: bool):
    """lupo - personal portfolio ledger"""
    try:
        config = load_system_config(config_path)
    except LupoError as e:
        fail(e)

    if directory is not None:
        config = config.model_copy(update={"home": directory.expanduser()})

    level = resolve_log_level(config.logging.level, verbose, quiet)
    LoggerFactory.configure(config.logging.model_copy(update={"level": level}))

    ctx.obj = config


# Register commands
main.add_command(init_command)
main.add_command(check_command)
main.add_command(trades_command)
main.add_command(stocks_command)
main.add_command(port_command)
main.add_command(report_command)
main.add_command(total_command)
main.add_command(prices_command)


if __name__ == "__main__":
    main()
