"""Shared state and error reporting for CLI commands."""

import sys
from typing import NoReturn

from rich.console import Console

from lupo.errors import format_error_chain
from lupo.services.portfolio.service import PortfolioService
from lupo.system.config import SystemConfig

console = Console()
err_console = Console(stderr=True)


def fail(exc: BaseException) -> NoReturn:
    """Print an error with its cause chain to stderr and exit with status 1."""
    err_console.print(format_error_chain(exc), style="red", markup=False, highlight=False)
    sys.exit(1)


def open_service(config: SystemConfig) -> PortfolioService:
    """Portfolio service for the configured home directory."""
    return PortfolioService.from_config(config)
