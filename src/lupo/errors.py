"""Error hierarchy for lupo.

Structural errors (bad file, bad row, dangling reference) abort the command.
Quote fetch errors are raised per symbol and recovered by the price fetcher.
Staleness and missing currency rates are never raised: they are recorded as
flags on the valued position.

Errors are chained with ``raise ... from`` so the CLI can print the full
cause chain via :func:`format_error_chain`.
"""

from pathlib import Path


class LupoError(Exception):
    """Base class for all lupo errors."""


class StoreIOError(LupoError):
    """Portfolio file or directory missing or unreadable."""


class ParseError(LupoError):
    """Malformed row or field in a portfolio file."""

    def __init__(self, message: str, path: Path | None = None, line: int | None = None, row: str | None = None):
        self.path = path
        self.line = line
        self.row = row
        location = ""
        if path is not None:
            location = f"{path.name}"
            if line is not None:
                location += f":{line}"
        detail = f"{location}: {message}" if location else message
        if row is not None:
            detail += f" (row: {row!r})"
        super().__init__(detail)


class UnknownInstrumentError(LupoError):
    """Trade references an instrument missing from the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown instrument '{name}': add it to the stocks file")


class UnknownCashAccountError(LupoError):
    """Trade needs a cash position that is not registered."""

    def __init__(self, cash_name: str, account: str):
        self.cash_name = cash_name
        self.account = account
        super().__init__(f"Unknown cash account '{cash_name}' for account '{account}': add it to the stocks file")


class QuoteFetchError(LupoError):
    """Quote retrieval failed for one symbol."""

    def __init__(self, ticker: str, message: str):
        self.ticker = ticker
        super().__init__(f"{ticker}: {message}")


def format_error_chain(exc: BaseException) -> str:
    """
    Render an exception and its causes, outermost first.

    Example:
        >>> try:
        ...     raise StoreIOError("Cannot open trades file") from FileNotFoundError("trades.tsv")
        ... except StoreIOError as e:
        ...     print(format_error_chain(e))
        error: Cannot open trades file
          caused by: trades.tsv
    """
    lines = [f"error: {exc}"]
    seen = {id(exc)}
    cause = _cause_of(exc)
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"  caused by: {cause}")
        cause = _cause_of(cause)
    return "\n".join(lines)


def _cause_of(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__
