"""CLI UI components - formatters and progress bars."""

from lupo.cli.ui.formatters import (
    create_group_table,
    create_instruments_table,
    create_positions_table,
    create_refresh_summary_table,
    create_trades_table,
    format_amount,
    format_percentage,
)
from lupo.cli.ui.progress import create_refresh_progress

__all__ = [
    "create_group_table",
    "create_instruments_table",
    "create_positions_table",
    "create_refresh_summary_table",
    "create_trades_table",
    "format_amount",
    "format_percentage",
    "create_refresh_progress",
]
