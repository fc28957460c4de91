"""Root conftest - shared portfolio home fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from lupo.services.ledger import LedgerStore
from lupo.services.ledger.store import STOCKS_HEADER, TRADES_HEADER
from lupo.system import LoggerFactory

CASH_IB = ["CashIB", "Cash", "Cash", "cash", "0", "", "USD", "USD"]
CASH_BANK = ["CashBank", "Cash", "Cash", "cash", "0", "", "EUR", "EUR"]
AAA = ["AAA", "Equity", "Tech", "growth", "3", "AAA", "USD", "USD"]
NESTLE = ["Nestle", "Equity", "Staples", "dividend", "2", "NESN.SW", "CHF", "CHF"]
REGISTRY = [CASH_IB, CASH_BANK, AAA, NESTLE]


def write_table(path: Path, header: list[str], rows: list[list[str]]) -> None:
    """Write a tab-separated table with its header row."""
    lines = ["\t".join(header)] + ["\t".join(row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to captured streams between tests."""
    yield
    LoggerFactory.reset()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Empty portfolio home directory."""
    directory = tmp_path / "portfolio"
    directory.mkdir()
    return directory


@pytest.fixture
def make_store(home: Path) -> Callable[..., LedgerStore]:
    """
    Build a ledger store from registry and ledger rows.

    Rows are lists of cells in TRADES_HEADER / STOCKS_HEADER order. The
    default registry holds CashIB (USD), CashBank (EUR), AAA (USD) and
    Nestle (CHF).
    """

    def _make(trades: list[list[str]], stocks: list[list[str]] | None = None) -> LedgerStore:
        stocks = REGISTRY if stocks is None else stocks
        write_table(home / "stocks.tsv", STOCKS_HEADER, stocks)
        write_table(home / "trades.tsv", TRADES_HEADER, trades)
        return LedgerStore.open(home)

    return _make
