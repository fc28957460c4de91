"""Commands __init__ - exports all commands."""

from lupo.cli.commands.ledger import stocks_command, trades_command
from lupo.cli.commands.portfolio import port_command, report_command, total_command
from lupo.cli.commands.prices import prices_command
from lupo.cli.commands.storage import check_command, init_command

__all__ = [
    "check_command",
    "init_command",
    "port_command",
    "prices_command",
    "report_command",
    "stocks_command",
    "total_command",
    "trades_command",
]
