"""Progress bar utilities for CLI."""

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TimeElapsedColumn


def create_refresh_progress(console: Console) -> Progress:
    """
    Create a Rich Progress instance for price refreshes.

    Args:
        console: Rich Console instance

    Returns:
        Configured Progress instance
    """
    return Progress(
        SpinnerColumn(),
        "[progress.description]{task.description}",
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
